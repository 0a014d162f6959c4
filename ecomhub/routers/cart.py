"""
Shopping cart of the authenticated customer.
"""
import logging

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config.database import get_database
from ..schemas.cart import AddToCartRequest, UpdateCartItemRequest
from ..schemas.common import SuccessResponse, ok
from ..services.cart import add_to_cart, cart_line_view, load_cart
from ..utils.dependencies import verify_owned, verify_product_exists
from ..utils.rate_limit import general_limiter
from ..utils.security import AuthenticatedCustomer, get_current_customer
from ..utils.serializers import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cart", tags=["Cart"], dependencies=[Depends(general_limiter)])


@router.post("/add", response_model=SuccessResponse)
async def add_item(
    request: AddToCartRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    product = await verify_product_exists(request.product_id, db)
    merged = await add_to_cart(db, customer.object_id, product["_id"], request.quantity)

    logger.info(f"Cart {'updated' if merged else 'item added'}: customer {customer.id}, product {product['_id']}")
    message = "Cart updated successfully" if merged else "Item added to cart successfully"
    return ok(message)


@router.get("/", response_model=SuccessResponse)
async def get_cart(
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    items = [cart_line_view(line) for line in await load_cart(db, customer.object_id)]
    return ok("Cart fetched successfully", {
        "items": items,
        "total_items": sum(item["quantity"] for item in items),
        "total_price": round(sum(item["total_price"] for item in items), 2),
    })


@router.delete("/remove/{cart_item_id}", response_model=SuccessResponse)
async def remove_item(
    cart_item_id: str,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    item = await verify_owned(db.cart, cart_item_id, customer.object_id, "cart item", "Cart item not found")
    await db.cart.delete_one({"_id": item["_id"]})
    return ok("Item removed from cart successfully")


@router.put("/update/{cart_item_id}", response_model=SuccessResponse)
async def update_item(
    cart_item_id: str,
    request: UpdateCartItemRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    item = await verify_owned(db.cart, cart_item_id, customer.object_id, "cart item", "Cart item not found")

    if request.quantity == 0:
        await db.cart.delete_one({"_id": item["_id"]})
        return ok("Item removed from cart successfully")

    await db.cart.update_one(
        {"_id": item["_id"]},
        {"$set": {"quantity": request.quantity, "updated_at": utcnow()}},
    )
    return ok("Cart item updated successfully")


@router.delete("/clear", response_model=SuccessResponse)
async def clear_cart(
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    result = await db.cart.delete_many({"customer_id": customer.object_id})
    logger.info(f"Cart cleared for customer {customer.id}: {result.deleted_count} items")
    return ok("Cart cleared successfully")
