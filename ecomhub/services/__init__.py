"""
Business logic shared between routers.
"""
