"""
Order placement and status changes.

Stock is reserved with conditional decrements so two checkouts can never
sell the same unit twice; a failed checkout gives back what it reserved.
"""
import logging
import random
import time
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..models.order import OrderDocument, OrderItemDocument, OrderStatusHistory
from ..schemas.order import OrderPlacementFields
from ..utils.dependencies import verify_owned
from ..utils.serializers import serialize_doc, utcnow
from .addresses import format_address

logger = logging.getLogger(__name__)


def generate_order_number() -> str:
    return f"ORD{int(time.time() * 1000)}{random.randint(0, 999):03d}"


async def resolve_addresses(
    db: AsyncIOMotorDatabase,
    customer_id: ObjectId,
    request: OrderPlacementFields,
) -> Tuple[str, str]:
    """Shipping and billing address snapshots for a new order."""
    if request.address_id:
        address = await verify_owned(
            db.customer_addresses, request.address_id, customer_id, "address", "Address not found"
        )
        shipping = format_address(address)
    else:
        shipping = (request.shipping_address or "").strip()

    if not shipping:
        raise HTTPException(status_code=400, detail="Shipping address is required")

    billing = (request.billing_address or "").strip() or shipping
    return shipping, billing


async def restock(db: AsyncIOMotorDatabase, items: List[Dict[str, Any]]) -> None:
    for item in items:
        await db.products.update_one(
            {"_id": item["product_id"]},
            {"$inc": {"quantity": item["quantity"]}, "$set": {"updated_at": utcnow()}},
        )


async def reserve_stock(db: AsyncIOMotorDatabase, items: List[Dict[str, Any]]) -> None:
    """
    Decrement stock for every item or for none of them.

    Raises:
        HTTPException: 400 when any product has less stock than requested
    """
    reserved: List[Dict[str, Any]] = []
    for item in items:
        result = await db.products.update_one(
            {"_id": item["product_id"], "quantity": {"$gte": item["quantity"]}},
            {"$inc": {"quantity": -item["quantity"]}, "$set": {"updated_at": utcnow()}},
        )
        if result.modified_count == 0:
            await restock(db, reserved)
            product = await db.products.find_one({"_id": item["product_id"]}) or {}
            raise HTTPException(
                status_code=400,
                detail=(
                    f"Insufficient stock for {item['product_name']}. "
                    f"Available: {product.get('quantity', 0)}, Requested: {item['quantity']}"
                ),
            )
        reserved.append(item)


def build_items(lines: List[Tuple[Dict[str, Any], int]]) -> List[OrderItemDocument]:
    """Snapshot (product, quantity) pairs into order items."""
    items = []
    for product, quantity in lines:
        if product is None or product.get("status") != "active":
            raise HTTPException(status_code=400, detail="One or more products are no longer available")
        price = float(product["price"])
        items.append(OrderItemDocument(
            product_id=product["_id"],
            product_name=product["name"],
            product_price=price,
            quantity=quantity,
            total_price=round(price * quantity, 2),
        ))
    return items


async def create_order(
    db: AsyncIOMotorDatabase,
    customer_id: ObjectId,
    lines: List[Tuple[Dict[str, Any], int]],
    request: OrderPlacementFields,
) -> Dict[str, Any]:
    """Validate, reserve stock and insert an order. Returns the stored document."""
    shipping, billing = await resolve_addresses(db, customer_id, request)
    items = build_items(lines)

    order = OrderDocument(
        customer_id=customer_id,
        order_number=generate_order_number(),
        items=items,
        total_amount=round(sum(item.total_price for item in items), 2),
        payment_method=request.payment_method,
        shipping_address=shipping,
        billing_address=billing,
        notes=request.notes,
        status_history=[OrderStatusHistory(status="pending", message="Order placed")],
    )
    order_doc = order.model_dump()

    await reserve_stock(db, order_doc["items"])
    try:
        result = await db.orders.insert_one(order_doc)
    except Exception:
        await restock(db, order_doc["items"])
        raise

    order_doc["_id"] = result.inserted_id
    logger.info(f"Order created: {order.order_number} (ID: {result.inserted_id}) for customer {customer_id}")
    return order_doc


def placement_result(order: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "order_id": str(order["_id"]),
        "order_number": order["order_number"],
        "total_amount": order["total_amount"],
        "item_count": len(order["items"]),
    }


async def change_status(
    db: AsyncIOMotorDatabase,
    order: Dict[str, Any],
    new_status: str,
    message: Optional[str] = None,
    updated_by: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Set a new status, append history and restock on cancellation.

    The update only applies while the order still has the status the caller
    read, so a concurrent change wins once and restocks once.

    Raises:
        HTTPException: 409 when the order's status changed in the meantime
    """
    entry = OrderStatusHistory(status=new_status, message=message, updated_by=updated_by)
    updates = {"status": new_status, "updated_at": utcnow(), **(extra or {})}

    result = await db.orders.update_one(
        {"_id": order["_id"], "status": order.get("status")},
        {"$set": updates, "$push": {"status_history": entry.model_dump()}},
    )
    if result.modified_count == 0:
        logger.warning(f"Order {order['_id']} changed before update to {new_status}")
        raise HTTPException(status_code=409, detail="Order status has changed, please refresh and try again")

    if new_status == "cancelled" and order.get("status") != "cancelled":
        await restock(db, order.get("items", []))

    logger.info(f"Order status updated: {order['_id']} {order.get('status')} -> {new_status}")
    return await db.orders.find_one({"_id": order["_id"]})


def order_view(order: Dict[str, Any]) -> Dict[str, Any]:
    view = serialize_doc(order)
    view["item_count"] = len(order.get("items", []))
    view["product_names"] = ", ".join(item["product_name"] for item in order.get("items", []))
    return view
