"""
Order placement and order history for the authenticated customer.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config.database import get_database
from ..models.order import CUSTOMER_CANCELLABLE, ORDER_STATUSES
from ..schemas.common import SuccessResponse, ok
from ..schemas.order import CancelOrderRequest, PlaceDirectRequest, PlaceFromCartRequest, PlaceOrderRequest
from ..services.cart import load_cart
from ..services.orders import change_status, create_order, order_view, placement_result
from ..utils.dependencies import validate_object_ids, verify_owned, verify_product_exists
from ..utils.rate_limit import general_limiter
from ..utils.security import AuthenticatedCustomer, get_current_customer
from ..utils.serializers import convert_object_ids

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"], dependencies=[Depends(general_limiter)])


async def _owned_order(db, order_id: str, customer: AuthenticatedCustomer):
    return await verify_owned(db.orders, order_id, customer.object_id, "order", "Order not found")


def _order_lines(lines):
    return [(line["product"], line["item"]["quantity"]) for line in lines]


@router.post("/place", status_code=201, response_model=SuccessResponse)
async def place_order(
    request: PlaceOrderRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Order everything in the cart, then empty it."""
    lines = await load_cart(db, customer.object_id)
    if not lines:
        raise HTTPException(status_code=400, detail="Cart is empty")

    order = await create_order(db, customer.object_id, _order_lines(lines), request)
    await db.cart.delete_many({"_id": {"$in": [line["item"]["_id"] for line in lines]}})

    return ok("Order placed successfully", placement_result(order))


@router.post("/place-from-cart", status_code=201, response_model=SuccessResponse)
async def place_order_from_cart(
    request: PlaceFromCartRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Order the selected cart items; the rest of the cart is kept."""
    item_ids = validate_object_ids(request.cart_item_ids, "cart item")
    lines = await load_cart(db, customer.object_id, item_ids)
    if not lines:
        raise HTTPException(status_code=400, detail="No valid cart items selected")

    order = await create_order(db, customer.object_id, _order_lines(lines), request)
    await db.cart.delete_many({"_id": {"$in": [line["item"]["_id"] for line in lines]}})

    return ok("Order placed successfully", placement_result(order))


@router.post("/place-direct", status_code=201, response_model=SuccessResponse)
async def place_direct_order(
    request: PlaceDirectRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Buy now: a single product without touching the cart."""
    product = await verify_product_exists(request.product_id, db)
    order = await create_order(db, customer.object_id, [(product, request.quantity)], request)
    return ok("Order placed successfully", placement_result(order))


@router.get("/", response_model=SuccessResponse)
async def list_orders(
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    orders = await db.orders.find({"customer_id": customer.object_id}).sort("created_at", -1).to_list(length=None)
    return ok("Orders fetched successfully", [order_view(order) for order in orders])


@router.get("/stats/summary", response_model=SuccessResponse)
async def order_summary(
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    pipeline = [
        {"$match": {"customer_id": customer.object_id}},
        {"$group": {"_id": "$status", "count": {"$sum": 1}, "amount": {"$sum": "$total_amount"}}},
    ]
    groups = await db.orders.aggregate(pipeline).to_list(length=None)

    summary = {f"{status}_orders": 0 for status in ORDER_STATUSES}
    total_orders = 0
    total_spent = 0.0
    for group in groups:
        summary[f"{group['_id']}_orders"] = group["count"]
        total_orders += group["count"]
        if group["_id"] != "cancelled":
            total_spent += group["amount"]

    summary.update({"total_orders": total_orders, "total_spent": round(total_spent, 2)})
    return ok("Order summary fetched successfully", summary)


@router.get("/{order_id}", response_model=SuccessResponse)
async def get_order(
    order_id: str,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    order = await _owned_order(db, order_id, customer)
    return ok("Order fetched successfully", order_view(order))


@router.put("/{order_id}/cancel", response_model=SuccessResponse)
async def cancel_order(
    order_id: str,
    request: CancelOrderRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    order = await _owned_order(db, order_id, customer)
    if order["status"] not in CUSTOMER_CANCELLABLE:
        raise HTTPException(status_code=400, detail=f"Order cannot be cancelled when it is {order['status']}")

    updated = await change_status(
        db, order, "cancelled",
        message=request.reason or "Cancelled by customer",
        updated_by=customer.id,
    )
    return ok("Order cancelled successfully", order_view(updated))


@router.get("/{order_id}/history", response_model=SuccessResponse)
async def order_history(
    order_id: str,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    order = await _owned_order(db, order_id, customer)
    return ok("Order history fetched successfully", convert_object_ids(order.get("status_history", [])))
