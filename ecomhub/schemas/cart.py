"""
Cart and wishlist request schemas.
"""
from pydantic import BaseModel, Field


class AddToCartRequest(BaseModel):
    product_id: str = Field(..., description="Product ID")
    quantity: int = Field(1, gt=0, le=100, description="Quantity to add (max 100)")


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(..., ge=0, le=100, description="New quantity; 0 removes the item")


class AddToWishlistRequest(BaseModel):
    product_id: str = Field(..., description="Product ID")
