"""
Razorpay gateway wrapper.

The SDK is synchronous, so calls are pushed to the threadpool to keep the
event loop free.
"""
import logging
from functools import lru_cache
from typing import Any, Dict

import razorpay
from razorpay.errors import SignatureVerificationError
from starlette.concurrency import run_in_threadpool

from ..config.settings import get_settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """The gateway rejected or failed a request."""


def to_paise(amount: float) -> int:
    return int(round(amount * 100))


class RazorpayGateway:
    def __init__(self, key_id: str, key_secret: str, currency: str = "INR"):
        self.key_id = key_id
        self.currency = currency
        self.client = razorpay.Client(auth=(key_id, key_secret))

    async def create_order(self, amount: float, receipt: str) -> Dict[str, Any]:
        data = {
            "amount": to_paise(amount),
            "currency": self.currency,
            "receipt": receipt,
            "payment_capture": 1,
        }
        try:
            order = await run_in_threadpool(self.client.order.create, data=data)
        except Exception as e:
            logger.error(f"Razorpay order creation failed: {e}")
            raise PaymentGatewayError(str(e)) from e

        logger.info(f"💳 Razorpay order created: {order.get('id')} for {data['amount']} paise")
        return order

    def verify_signature(self, razorpay_order_id: str, razorpay_payment_id: str, razorpay_signature: str) -> bool:
        try:
            self.client.utility.verify_payment_signature({
                "razorpay_order_id": razorpay_order_id,
                "razorpay_payment_id": razorpay_payment_id,
                "razorpay_signature": razorpay_signature,
            })
        except SignatureVerificationError:
            logger.warning(f"Signature mismatch for Razorpay order {razorpay_order_id}")
            return False
        return True


@lru_cache()
def get_payment_gateway() -> RazorpayGateway:
    """FastAPI dependency returning the configured gateway."""
    settings = get_settings()
    return RazorpayGateway(settings.razorpay_key_id, settings.razorpay_key_secret, settings.payment_currency)
