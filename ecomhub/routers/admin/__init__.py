"""
Admin dashboard API routers.
"""
from fastapi import APIRouter

from . import auth, catalog, customers, orders, roles, users

admin_router = APIRouter()
for router in (
    auth.router,
    users.router,
    roles.roles_router,
    roles.user_roles_router,
    catalog.categories_router,
    catalog.subcategories_router,
    catalog.products_router,
    catalog.details_router,
    orders.router,
    customers.router,
):
    admin_router.include_router(router)

__all__ = ["admin_router"]
