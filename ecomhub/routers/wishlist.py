"""
Wishlist of the authenticated customer.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config.database import get_database
from ..schemas.cart import AddToWishlistRequest
from ..schemas.common import SuccessResponse, ok
from ..services.cart import add_to_cart
from ..utils.dependencies import validate_object_id, verify_owned, verify_product_exists
from ..utils.rate_limit import general_limiter
from ..utils.security import AuthenticatedCustomer, get_current_customer
from ..utils.serializers import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wishlist", tags=["Wishlist"], dependencies=[Depends(general_limiter)])


@router.post("/add", response_model=SuccessResponse)
async def add_item(
    request: AddToWishlistRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    product = await verify_product_exists(request.product_id, db, active_only=False)

    query = {"customer_id": customer.object_id, "product_id": product["_id"]}
    if await db.wishlist.find_one(query):
        raise HTTPException(status_code=400, detail="Item already in wishlist")

    await db.wishlist.insert_one({**query, "added_at": utcnow()})
    return ok("Item added to wishlist successfully")


@router.get("/", response_model=SuccessResponse)
async def get_wishlist(
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    items = await db.wishlist.find({"customer_id": customer.object_id}).sort("added_at", -1).to_list(length=None)
    product_ids = [item["product_id"] for item in items]
    products = {
        p["_id"]: p
        for p in await db.products.find({"_id": {"$in": product_ids}}).to_list(length=None)
    }

    views = []
    for item in items:
        product = products.get(item["product_id"], {})
        images = product.get("images") or []
        views.append({
            "id": str(item["_id"]),
            "product_id": str(item["product_id"]),
            "added_at": item.get("added_at"),
            "name": product.get("name"),
            "price": product.get("price"),
            "description": product.get("description"),
            "image": images[0] if images else None,
            "stock": product.get("quantity", 0),
            "status": product.get("status"),
        })

    return ok("Wishlist fetched successfully", {"items": views, "total_items": len(views)})


@router.delete("/clear", response_model=SuccessResponse)
async def clear_wishlist(
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    await db.wishlist.delete_many({"customer_id": customer.object_id})
    return ok("Wishlist cleared successfully")


@router.get("/check/{product_id}", response_model=SuccessResponse)
async def check_item(
    product_id: str,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    object_id = validate_object_id(product_id, "product")
    found = await db.wishlist.find_one({"customer_id": customer.object_id, "product_id": object_id})
    return ok("Wishlist status fetched", {"is_in_wishlist": found is not None})


@router.delete("/remove/{wishlist_item_id}", response_model=SuccessResponse)
async def remove_item(
    wishlist_item_id: str,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    item = await verify_owned(
        db.wishlist, wishlist_item_id, customer.object_id, "wishlist item", "Wishlist item not found"
    )
    await db.wishlist.delete_one({"_id": item["_id"]})
    return ok("Item removed from wishlist successfully")


@router.post("/move-to-cart/{wishlist_item_id}", response_model=SuccessResponse)
async def move_to_cart(
    wishlist_item_id: str,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    object_id = validate_object_id(wishlist_item_id, "wishlist item")
    item = await db.wishlist.find_one({"_id": object_id, "customer_id": customer.object_id})
    if not item:
        raise HTTPException(status_code=400, detail="Wishlist item not found")

    await verify_product_exists(str(item["product_id"]), db)
    await add_to_cart(db, customer.object_id, item["product_id"], 1)
    await db.wishlist.delete_one({"_id": item["_id"]})

    logger.info(f"Wishlist item {wishlist_item_id} moved to cart for customer {customer.id}")
    return ok("Item moved to cart successfully")
