"""
Read-only customer overview for staff.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...config.database import get_database
from ...services.orders import order_view
from ...utils.dependencies import validate_object_id
from ...utils.security import get_current_admin
from ...utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Admin Customers"], dependencies=[Depends(get_current_admin)])


@router.get("/")
async def list_customers(db: AsyncIOMotorDatabase = Depends(get_database)):
    """Customers with order totals, newest first"""
    pipeline = [
        {"$group": {
            "_id": "$customer_id",
            "total_orders": {"$sum": 1},
            "last_order_date": {"$max": "$created_at"},
        }},
    ]
    order_stats = {s["_id"]: s for s in await db.orders.aggregate(pipeline).to_list(length=None)}

    spent_pipeline = [
        {"$match": {"status": {"$ne": "cancelled"}}},
        {"$group": {"_id": "$customer_id", "total_spent": {"$sum": "$total_amount"}}},
    ]
    spent = {s["_id"]: s["total_spent"] for s in await db.orders.aggregate(spent_pipeline).to_list(length=None)}

    customers = []
    for customer in await db.customers.find().sort("created_at", -1).to_list(length=None):
        stats = order_stats.get(customer["_id"], {})
        view = serialize_doc(customer)
        view.update({
            "total_orders": stats.get("total_orders", 0),
            "total_spent": round(spent.get(customer["_id"], 0), 2),
            "last_order_date": stats.get("last_order_date"),
        })
        customers.append(view)

    return {"success": True, "customers": customers}


@router.get("/{customer_id}")
async def get_customer(customer_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    customer = await db.customers.find_one({"_id": validate_object_id(customer_id, "customer")})
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    addresses = await db.customer_addresses.find({"customer_id": customer["_id"]}).to_list(length=None)
    orders = await db.orders.find({"customer_id": customer["_id"]}).sort("created_at", -1).limit(10).to_list(length=10)

    view = serialize_doc(customer)
    view["addresses"] = serialize_docs(addresses)
    view["recent_orders"] = [order_view(order) for order in orders]
    view["total_orders"] = await db.orders.count_documents({"customer_id": customer["_id"]})
    return {"success": True, "customer": view}
