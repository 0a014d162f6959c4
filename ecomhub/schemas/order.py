"""
Order API schemas for request validation.
"""
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.order import ORDER_STATUSES, PAYMENT_METHODS


class OrderPlacementFields(BaseModel):
    """Checkout fields shared by every way of placing an order."""
    payment_method: str = Field('cod', description="Payment method used")
    shipping_address: Optional[str] = Field(None, max_length=1000, description="Free-form shipping address")
    address_id: Optional[str] = Field(None, description="Saved address to ship to")
    billing_address: Optional[str] = Field(None, max_length=1000)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator('payment_method')
    @classmethod
    def validate_payment_method(cls, v):
        if v.lower() not in PAYMENT_METHODS:
            raise ValueError(f'Invalid payment method. Must be one of: {PAYMENT_METHODS}')
        return v.lower()


class PlaceOrderRequest(OrderPlacementFields):
    """Order the whole cart."""


class PlaceFromCartRequest(OrderPlacementFields):
    """Order only the listed cart items."""
    cart_item_ids: List[str] = Field(..., min_length=1, max_length=50)


class PlaceDirectRequest(OrderPlacementFields):
    """Buy a single product without going through the cart."""
    product_id: str = Field(..., description="Product ID")
    quantity: int = Field(1, gt=0, le=100, description="Quantity ordered (max 100)")


class CancelOrderRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class UpdateOrderStatusRequest(BaseModel):
    """Request schema for updating order status."""
    status: str = Field(..., description="New order status")
    message: Optional[str] = Field(None, max_length=500, description="Note stored in the status history")

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v.lower() not in ORDER_STATUSES:
            raise ValueError(f'Invalid status. Must be one of: {ORDER_STATUSES}')
        return v.lower()
