"""
ecomhub: storefront and admin REST API for catalog, cart, orders,
payments and role-based administration.
"""

__version__ = "1.0.0"
