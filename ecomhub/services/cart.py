"""
Cart persistence helpers.
"""
import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ..utils.serializers import utcnow

logger = logging.getLogger(__name__)


async def add_to_cart(db: AsyncIOMotorDatabase, customer_id: ObjectId, product_id: ObjectId, quantity: int) -> bool:
    """
    Add a product to the cart, merging with an existing line.

    A single upsert keeps concurrent adds of the same product on one line.

    Returns:
        True when an existing line was incremented, False when a new line was created
    """
    now = utcnow()
    previous = await db.cart.find_one_and_update(
        {"customer_id": customer_id, "product_id": product_id},
        {
            "$inc": {"quantity": quantity},
            "$set": {"updated_at": now},
            "$setOnInsert": {"added_at": now},
        },
        upsert=True,
        return_document=ReturnDocument.BEFORE,
    )
    return previous is not None


async def load_cart(
    db: AsyncIOMotorDatabase,
    customer_id: ObjectId,
    item_ids: Optional[List[ObjectId]] = None,
) -> List[Dict[str, Any]]:
    """
    Cart lines joined with their products, newest first.

    Each line is ``{"item": <cart doc>, "product": <product doc or None>}``.
    """
    query: Dict[str, Any] = {"customer_id": customer_id}
    if item_ids is not None:
        query["_id"] = {"$in": item_ids}

    items = await db.cart.find(query).sort("added_at", -1).to_list(length=None)
    product_ids = list({item["product_id"] for item in items})
    products = {}
    if product_ids:
        for product in await db.products.find({"_id": {"$in": product_ids}}).to_list(length=None):
            products[product["_id"]] = product

    return [{"item": item, "product": products.get(item["product_id"])} for item in items]


def cart_line_view(line: Dict[str, Any]) -> Dict[str, Any]:
    item, product = line["item"], line["product"] or {}
    price = product.get("price", 0)
    images = product.get("images") or []
    return {
        "id": str(item["_id"]),
        "product_id": str(item["product_id"]),
        "quantity": item["quantity"],
        "added_at": item.get("added_at"),
        "name": product.get("name"),
        "price": price,
        "image": images[0] if images else None,
        "stock": product.get("quantity", 0),
        "status": product.get("status"),
        "total_price": round(price * item["quantity"], 2),
    }
