"""
Payment request schemas.
"""
from typing import Optional

from pydantic import BaseModel, Field


class CreatePaymentOrderRequest(BaseModel):
    amount: Optional[float] = Field(None, gt=0, description="Amount in rupees; defaults to the order total")
    order_id: Optional[str] = Field(None, description="Shop order being paid")


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)
    order_id: Optional[str] = None
