"""
Order data models for database documents.
These represent the actual structure of documents stored in MongoDB.
"""
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.serializers import utcnow

ORDER_STATUSES = ['pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled', 'refunded']
PAYMENT_STATUSES = ['pending', 'paid', 'failed', 'refunded']
PAYMENT_METHODS = ['cod', 'online', 'razorpay', 'upi', 'card']

# Allowed status changes; anything else is rejected
ORDER_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    'pending': frozenset({'confirmed', 'processing', 'cancelled'}),
    'confirmed': frozenset({'processing', 'shipped', 'cancelled'}),
    'processing': frozenset({'shipped', 'cancelled'}),
    'shipped': frozenset({'delivered'}),
    'delivered': frozenset({'refunded'}),
    'cancelled': frozenset({'refunded'}),
    'refunded': frozenset(),
}

CUSTOMER_CANCELLABLE = frozenset({'pending', 'confirmed', 'processing'})


def can_transition(current: str, new: str) -> bool:
    return new in ORDER_TRANSITIONS.get(current, frozenset())


class OrderItemDocument(BaseModel):
    """Order item snapshot embedded in an order."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    product_id: ObjectId = Field(..., description="Product ID reference")
    product_name: str = Field(..., description="Product name at time of order")
    product_price: float = Field(..., ge=0, description="Price per item at time of order")
    quantity: int = Field(..., gt=0, description="Quantity ordered")
    total_price: float = Field(..., ge=0, description="Total price for this item")


class OrderStatusHistory(BaseModel):
    """Order status change history."""
    status: str = Field(..., description="Status value")
    message: Optional[str] = Field(None, description="Reason for status change")
    created_at: datetime = Field(default_factory=utcnow, description="When status changed")
    updated_by: Optional[str] = Field(None, description="Who updated the status")


class OrderDocument(BaseModel):
    """
    Order document model representing the MongoDB document structure.
    This matches how orders are stored in the database.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    customer_id: ObjectId = Field(..., description="Customer who placed the order")
    order_number: str = Field(..., description="Human-facing order number")
    items: List[OrderItemDocument] = Field(..., min_length=1, max_length=50, description="Order items")
    total_amount: float = Field(..., ge=0, description="Total order amount")

    # Order status and payment tracking
    status: str = Field(default="pending", description="Order status")
    payment_method: str = Field(default="cod", description="Payment method used")
    payment_status: str = Field(default="pending", description="Payment status")

    shipping_address: str = Field(..., description="Shipping address snapshot")
    billing_address: str = Field(..., description="Billing address snapshot")
    notes: Optional[str] = Field(None, description="Order notes")

    status_history: List[OrderStatusHistory] = Field(default_factory=list)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, description="Order creation timestamp")
    updated_at: datetime = Field(default_factory=utcnow, description="Last update timestamp")

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v.lower() not in ORDER_STATUSES:
            raise ValueError(f'Invalid status. Must be one of: {ORDER_STATUSES}')
        return v.lower()

    @field_validator('payment_method')
    @classmethod
    def validate_payment_method(cls, v):
        if v.lower() not in PAYMENT_METHODS:
            raise ValueError(f'Invalid payment method. Must be one of: {PAYMENT_METHODS}')
        return v.lower()

    @field_validator('payment_status')
    @classmethod
    def validate_payment_status(cls, v):
        if v.lower() not in PAYMENT_STATUSES:
            raise ValueError(f'Invalid payment status. Must be one of: {PAYMENT_STATUSES}')
        return v.lower()
