"""
Models package for database document structures.
These models represent how data is stored in MongoDB.
"""
from .product import ProductDocument, ProductDetailsDocument, PRODUCT_STATUSES
from .order import (
    OrderDocument,
    OrderItemDocument,
    OrderStatusHistory,
    ORDER_STATUSES,
    PAYMENT_METHODS,
    can_transition,
)
from .payment import PaymentDocument

__all__ = [
    # Product models
    "ProductDocument",
    "ProductDetailsDocument",
    "PRODUCT_STATUSES",

    # Order models
    "OrderDocument",
    "OrderItemDocument",
    "OrderStatusHistory",
    "ORDER_STATUSES",
    "PAYMENT_METHODS",
    "can_transition",

    # Payment models
    "PaymentDocument",
]
