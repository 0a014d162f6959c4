"""
Payment data models for database documents.
"""
from datetime import datetime
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.serializers import utcnow

PAYMENT_RECORD_STATUSES = ['created', 'paid', 'failed']


class PaymentDocument(BaseModel):
    """One gateway order and, once the customer pays, its capture details."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    customer_id: ObjectId = Field(..., description="Paying customer")
    order_id: Optional[ObjectId] = Field(None, description="Shop order this payment settles")
    razorpay_order_id: str = Field(..., description="Gateway order id")
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    amount: float = Field(..., gt=0, description="Amount in rupees")
    amount_paise: int = Field(..., gt=0, description="Amount in the smallest currency unit")
    currency: str = Field(default="INR")
    receipt: str = Field(..., description="Receipt reference sent to the gateway")
    status: str = Field(default="created")

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v not in PAYMENT_RECORD_STATUSES:
            raise ValueError(f'Invalid payment status. Must be one of: {PAYMENT_RECORD_STATUSES}')
        return v
