"""
FastAPI dependencies for database access and common validations
"""
import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import HTTPException, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config.settings import get_settings

logger = logging.getLogger(__name__)


def validate_object_id(object_id: str, resource_name: str = "resource") -> ObjectId:
    """
    Validate and convert string to ObjectId

    Args:
        object_id: String representation of ObjectId
        resource_name: Name of the resource for error messages

    Returns:
        Valid ObjectId instance

    Raises:
        HTTPException: If ObjectId format is invalid
    """
    if not ObjectId.is_valid(object_id):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {resource_name} ID"
        )
    return ObjectId(object_id)


async def verify_product_exists(
    product_id: str,
    db: AsyncIOMotorDatabase,
    active_only: bool = True,
) -> Dict[str, Any]:
    """
    Verify that a product exists in the database

    Args:
        product_id: Product ID to verify
        db: Database instance
        active_only: Treat inactive products as missing

    Returns:
        Product document if found

    Raises:
        HTTPException: If product is not found or ID is invalid
    """
    object_id = validate_object_id(product_id, "product")

    query: Dict[str, Any] = {"_id": object_id}
    if active_only:
        query["status"] = "active"

    product = await db.products.find_one(query)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    return product


async def verify_owned(
    collection,
    item_id: str,
    customer_id: ObjectId,
    resource_name: str,
    not_found: str,
) -> Dict[str, Any]:
    """
    Fetch a document by id that must belong to the given customer.

    Documents owned by someone else are reported exactly like missing ones.
    """
    object_id = validate_object_id(item_id, resource_name)
    doc = await collection.find_one({"_id": object_id, "customer_id": customer_id})
    if not doc:
        raise HTTPException(status_code=404, detail=not_found)
    return doc


def validate_object_ids(ids: List[str], resource_name: str) -> List[ObjectId]:
    return [validate_object_id(value, resource_name) for value in ids]


class PageParams:
    """Page-based pagination query parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)"),
        limit: Optional[int] = Query(None, ge=1, le=100, description="Items per page"),
    ):
        self.page = page
        self.limit = limit or get_settings().default_page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class AdminPageParams(PageParams):
    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)"),
        limit: Optional[int] = Query(None, ge=1, le=100, description="Items per page"),
    ):
        super().__init__(page=page, limit=limit or get_settings().admin_page_size)
