"""
Catalog data models for database documents.
These represent the actual structure of documents stored in MongoDB.
"""
from datetime import datetime
from typing import Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

from ..utils.serializers import utcnow

PRODUCT_STATUSES = ['active', 'inactive']


class ProductDocument(BaseModel):
    """
    Product document model representing the MongoDB document structure.
    This matches how products are stored in the database.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    price: float = Field(..., gt=0, description="Product price (must be positive)")
    quantity: int = Field(default=0, ge=0, description="Available stock quantity")
    images: List[str] = Field(default_factory=list, description="List of image URLs")

    category_id: ObjectId = Field(..., description="Category reference")
    subcategory_id: Optional[ObjectId] = Field(None, description="Subcategory reference")

    status: str = Field(default="active", description="active products are visible in the storefront")
    featured: bool = Field(default=False, description="Shown in the featured list")

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=utcnow, description="Last update timestamp")


class ProductDetailsDocument(BaseModel):
    """Extended product information kept in its own collection."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    product_id: ObjectId = Field(..., description="Product reference (one details document per product)")
    brand: Optional[str] = None
    material: Optional[str] = None
    dimensions: Optional[str] = None
    weight: Optional[str] = None
    color: Optional[str] = None
    warranty: Optional[str] = None
    specifications: Dict[str, str] = Field(default_factory=dict, description="Free-form key/value specs")

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
