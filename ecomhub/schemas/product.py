"""
Catalog API schemas for request validation: categories, subcategories,
products and product details.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.product import PRODUCT_STATUSES

SORTABLE_FIELDS = ['created_at', 'price', 'name']


# Categories

class CategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Category name")
    description: Optional[str] = Field(None, max_length=1000)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Category name is required')
        return v


class SubcategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Subcategory name")
    category_id: str = Field(..., description="Parent category ID")
    description: Optional[str] = Field(None, max_length=1000)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Subcategory name is required')
        return v


# Products

class CreateProductRequest(BaseModel):
    """Request schema for creating a new product."""
    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    description: Optional[str] = Field(None, max_length=5000, description="Product description")
    price: float = Field(..., gt=0, description="Product price (must be positive)")
    quantity: int = Field(0, ge=0, description="Available stock quantity")
    images: List[str] = Field(default_factory=list, description="List of image URLs")
    category_id: str = Field(..., description="Category ID")
    subcategory_id: Optional[str] = Field(None, description="Subcategory ID")
    status: str = Field("active", description="active or inactive")
    featured: bool = Field(False)

    @field_validator('images')
    @classmethod
    def validate_images(cls, v):
        if len(v) > 10:
            raise ValueError('Maximum 10 images allowed')
        return v

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v.lower() not in PRODUCT_STATUSES:
            raise ValueError(f'Invalid status. Must be one of: {PRODUCT_STATUSES}')
        return v.lower()


class UpdateProductRequest(BaseModel):
    """Request schema for updating a product."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    price: Optional[float] = Field(None, gt=0)
    quantity: Optional[int] = Field(None, ge=0)
    images: Optional[List[str]] = None
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    status: Optional[str] = None
    featured: Optional[bool] = None

    @field_validator('images')
    @classmethod
    def validate_images(cls, v):
        if v is not None and len(v) > 10:
            raise ValueError('Maximum 10 images allowed')
        return v

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v is not None and v.lower() not in PRODUCT_STATUSES:
            raise ValueError(f'Invalid status. Must be one of: {PRODUCT_STATUSES}')
        return v.lower() if v else v


class ProductDetailsFields(BaseModel):
    brand: Optional[str] = Field(None, max_length=100)
    material: Optional[str] = Field(None, max_length=100)
    dimensions: Optional[str] = Field(None, max_length=100)
    weight: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)
    warranty: Optional[str] = Field(None, max_length=100)
    specifications: Optional[Dict[str, str]] = None


class ProductDetailsRequest(ProductDetailsFields):
    product_id: str = Field(..., description="Product these details describe")
