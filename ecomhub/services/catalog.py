"""
Catalog queries shared by the storefront and admin product routes.
"""
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..schemas.common import PaginationMeta, build_pagination
from ..utils.serializers import serialize_doc

logger = logging.getLogger(__name__)

SORT_FIELDS = {'created_at', 'price', 'name'}


def active_only(query: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {**(query or {}), "status": "active"}


def text_search(term: str, *fields: str) -> Dict[str, Any]:
    """Case-insensitive substring match on any of the fields."""
    pattern = {"$regex": re.escape(term), "$options": "i"}
    return {"$or": [{field: pattern} for field in fields]}


def price_range(min_price: Optional[float], max_price: Optional[float]) -> Dict[str, Any]:
    price_filter: Dict[str, Any] = {}
    if min_price is not None:
        price_filter["$gte"] = min_price
    if max_price is not None:
        price_filter["$lte"] = max_price
    return {"price": price_filter} if price_filter else {}


async def names_by_id(collection, ids, field: str = "name") -> Dict[ObjectId, Any]:
    if not ids:
        return {}
    docs = await collection.find({"_id": {"$in": list(ids)}}).to_list(length=None)
    return {doc["_id"]: doc.get(field) for doc in docs}


async def attach_category_names(db: AsyncIOMotorDatabase, products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Add category_name/subcategory_name to raw product documents."""
    category_ids = {p["category_id"] for p in products if p.get("category_id")}
    subcategory_ids = {p["subcategory_id"] for p in products if p.get("subcategory_id")}

    categories = await names_by_id(db.categories, category_ids)
    subcategories = await names_by_id(db.subcategories, subcategory_ids)

    for product in products:
        product["category_name"] = categories.get(product.get("category_id"))
        product["subcategory_name"] = subcategories.get(product.get("subcategory_id"))
    return products


async def find_products(
    db: AsyncIOMotorDatabase,
    query: Dict[str, Any],
    page: int,
    limit: int,
    sort_by: str = "created_at",
    sort_order: str = "DESC",
) -> Tuple[List[Dict[str, Any]], PaginationMeta]:
    """One page of products matching the query, serialized, plus pagination metadata."""
    if sort_by not in SORT_FIELDS:
        sort_by = "created_at"
    direction = 1 if sort_order.upper() == "ASC" else -1

    total = await db.products.count_documents(query)
    cursor = db.products.find(query).sort(sort_by, direction).skip((page - 1) * limit).limit(limit)
    products = await cursor.to_list(length=limit)

    await attach_category_names(db, products)
    return [serialize_doc(p) for p in products], build_pagination(page, limit, total)


async def related_products(db: AsyncIOMotorDatabase, product: Dict[str, Any], limit: int) -> List[Dict[str, Any]]:
    """Active products from the same subcategory first, then from the same category."""
    related: List[Dict[str, Any]] = []
    seen = {product["_id"]}

    for field in ("subcategory_id", "category_id"):
        if len(related) >= limit or not product.get(field):
            continue
        query = active_only({field: product[field], "_id": {"$nin": list(seen)}})
        cursor = db.products.find(query).sort("created_at", -1).limit(limit - len(related))
        for candidate in await cursor.to_list(length=limit):
            seen.add(candidate["_id"])
            related.append(candidate)

    await attach_category_names(db, related)
    return [serialize_doc(p) for p in related]


async def get_product_details(db: AsyncIOMotorDatabase, product_id: ObjectId) -> Optional[Dict[str, Any]]:
    return serialize_doc(await db.product_details.find_one({"product_id": product_id}))
