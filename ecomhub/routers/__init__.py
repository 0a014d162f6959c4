"""
Customer-facing API routers, mounted under the API prefix.
"""
from fastapi import APIRouter

from . import addresses, cart, customers, orders, payments, products, wishlist

api_router = APIRouter()
for module in (customers, products, cart, wishlist, addresses, orders, payments):
    api_router.include_router(module.router)

__all__ = ["api_router"]
