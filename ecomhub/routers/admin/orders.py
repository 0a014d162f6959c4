"""
Order administration: listing, search, statistics and status changes.
"""
import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...config.database import get_database
from ...models.order import ORDER_STATUSES, can_transition
from ...schemas.common import SuccessResponse, build_pagination, ok
from ...schemas.order import UpdateOrderStatusRequest
from ...services.orders import change_status, order_view
from ...utils.dependencies import AdminPageParams, validate_object_id
from ...utils.security import AuthenticatedAdmin, get_current_admin
from ...utils.serializers import serialize_docs, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Admin Orders"], dependencies=[Depends(get_current_admin)])

CUSTOMER_FIELDS = {"name": 1, "email": 1, "phone": 1}

# Revenue counts orders that were paid or delivered and not cancelled
REVENUE_MATCH = {
    "status": {"$nin": ["cancelled", "refunded"]},
    "$or": [{"payment_status": "paid"}, {"status": "delivered"}],
}


async def _with_customers(db: AsyncIOMotorDatabase, orders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    customer_ids = list({order["customer_id"] for order in orders})
    customers = {
        c["_id"]: c
        for c in await db.customers.find({"_id": {"$in": customer_ids}}, CUSTOMER_FIELDS).to_list(length=None)
    }

    views = []
    for order in orders:
        customer = customers.get(order["customer_id"], {})
        view = order_view(order)
        view.update({
            "customer_name": customer.get("name"),
            "customer_email": customer.get("email"),
            "customer_phone": customer.get("phone"),
        })
        views.append(view)
    return views


async def _revenue(db: AsyncIOMotorDatabase) -> float:
    pipeline = [
        {"$match": REVENUE_MATCH},
        {"$group": {"_id": None, "total": {"$sum": "$total_amount"}}},
    ]
    result = await db.orders.aggregate(pipeline).to_list(length=None)
    return round(result[0]["total"], 2) if result else 0.0


@router.get("/", response_model=SuccessResponse)
async def list_orders(
    paging: AdminPageParams = Depends(),
    status: Optional[str] = Query(None, description="Order status or 'all'"),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    query: Dict[str, Any] = {}
    if status and status.lower() != "all":
        query["status"] = status.lower()

    total = await db.orders.count_documents(query)
    cursor = db.orders.find(query).sort("created_at", -1).skip(paging.offset).limit(paging.limit)
    orders = await _with_customers(db, await cursor.to_list(length=paging.limit))

    return ok("Orders fetched successfully", {
        "orders": orders,
        "pagination": build_pagination(paging.page, paging.limit, total),
    })


@router.get("/search", response_model=SuccessResponse)
async def search_orders(
    search: str = Query(..., min_length=1, description="Order number, customer name or email"),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
    customers = await db.customers.find(
        {"$or": [{"name": pattern}, {"email": pattern}]}, {"_id": 1}
    ).to_list(length=None)

    query = {"$or": [
        {"order_number": pattern},
        {"customer_id": {"$in": [c["_id"] for c in customers]}},
    ]}
    orders = await db.orders.find(query).sort("created_at", -1).to_list(length=None)
    return ok("Orders fetched successfully", await _with_customers(db, orders))


@router.get("/date-range", response_model=SuccessResponse)
async def orders_by_date(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Orders created between two dates, both inclusive"""
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="Start date must be before end date")

    query = {"created_at": {
        "$gte": datetime.combine(start_date, time.min),
        "$lt": datetime.combine(end_date + timedelta(days=1), time.min),
    }}
    orders = await db.orders.find(query).sort("created_at", -1).to_list(length=None)
    return ok("Orders fetched successfully", await _with_customers(db, orders))


@router.get("/stats", response_model=SuccessResponse)
async def order_stats(db: AsyncIOMotorDatabase = Depends(get_database)):
    pipeline = [{"$group": {"_id": "$status", "count": {"$sum": 1}}}]
    groups = {g["_id"]: g["count"] for g in await db.orders.aggregate(pipeline).to_list(length=None)}

    stats = {f"{status}_orders": groups.get(status, 0) for status in ORDER_STATUSES}
    stats["total_orders"] = sum(groups.values())
    stats["total_revenue"] = await _revenue(db)
    return ok("Order statistics fetched successfully", stats)


@router.get("/dashboard", response_model=SuccessResponse)
async def dashboard(db: AsyncIOMotorDatabase = Depends(get_database)):
    today = datetime.combine(utcnow().date(), time.min)
    recent = await db.orders.find().sort("created_at", -1).limit(5).to_list(length=5)

    return ok("Dashboard data fetched successfully", {
        "total_orders": await db.orders.count_documents({}),
        "total_revenue": await _revenue(db),
        "pending_orders": await db.orders.count_documents({"status": "pending"}),
        "delivered_orders": await db.orders.count_documents({"status": "delivered"}),
        "today_orders": await db.orders.count_documents({"created_at": {"$gte": today}}),
        "recent_orders": await _with_customers(db, recent),
    })


@router.get("/{order_id}", response_model=SuccessResponse)
async def get_order(order_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    order = await db.orders.find_one({"_id": validate_object_id(order_id, "order")})
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    view = (await _with_customers(db, [order]))[0]
    payments = await db.order_payments.find({"order_id": order["_id"]}).to_list(length=None)
    view["payments"] = serialize_docs(payments)
    return ok("Order fetched successfully", view)


@router.put("/{order_id}/status", response_model=SuccessResponse)
async def update_order_status(
    order_id: str,
    request: UpdateOrderStatusRequest,
    admin: AuthenticatedAdmin = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Update order status following the allowed transitions"""
    order = await db.orders.find_one({"_id": validate_object_id(order_id, "order")})
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    if not can_transition(order["status"], request.status):
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change order status from {order['status']} to {request.status}",
        )

    extra = {}
    if request.status == "refunded" and order.get("payment_status") == "paid":
        extra["payment_status"] = "refunded"
    elif request.status == "delivered" and order.get("payment_method") == "cod":
        extra["payment_status"] = "paid"

    updated = await change_status(
        db, order, request.status,
        message=request.message or f"Status changed to {request.status}",
        updated_by=admin.id,
        extra=extra,
    )
    return ok("Order status updated successfully", order_view(updated))
