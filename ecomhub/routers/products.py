"""
Storefront catalog browsing. Only active products are visible here.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config.database import get_database
from ..schemas.common import SuccessResponse, ok
from ..schemas.product import SORTABLE_FIELDS
from ..services.catalog import (
    active_only,
    attach_category_names,
    find_products,
    get_product_details,
    names_by_id,
    price_range,
    related_products,
    text_search,
)
from ..utils.dependencies import PageParams, validate_object_id, verify_product_exists
from ..utils.rate_limit import general_limiter
from ..utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"], dependencies=[Depends(general_limiter)])


@router.get("/", response_model=SuccessResponse)
async def list_products(
    paging: PageParams = Depends(),
    sort_by: str = Query("created_at", pattern=f"^({'|'.join(SORTABLE_FIELDS)})$"),
    sort_order: str = Query("DESC", pattern="^(ASC|DESC|asc|desc)$", description="ASC or DESC"),
    min_price: Optional[float] = Query(None, ge=0, description="Minimum price filter"),
    max_price: Optional[float] = Query(None, gt=0, description="Maximum price filter"),
    category_id: Optional[str] = Query(None, description="Filter by category"),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """List products with optional filtering, sorting and pagination"""
    query = active_only(price_range(min_price, max_price))
    if category_id:
        query["category_id"] = validate_object_id(category_id, "category")

    products, pagination = await find_products(db, query, paging.page, paging.limit, sort_by, sort_order)
    return ok("Products fetched successfully", {"products": products, "pagination": pagination})


@router.get("/search/{search_query}", response_model=SuccessResponse)
async def search_products(
    search_query: str,
    paging: PageParams = Depends(),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    term = search_query.strip()
    if len(term) < 2:
        raise HTTPException(status_code=400, detail="Search query must be at least 2 characters long")

    query = active_only(text_search(term, "name", "description"))
    products, pagination = await find_products(db, query, paging.page, paging.limit)
    return ok("Search results fetched successfully", {
        "products": products,
        "pagination": pagination,
        "search_query": term,
    })


@router.get("/featured/list", response_model=SuccessResponse)
async def featured_products(
    limit: int = Query(8, ge=1, le=50),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    cursor = db.products.find(active_only({"featured": True})).sort("created_at", -1).limit(limit)
    products = await attach_category_names(db, await cursor.to_list(length=limit))
    return ok("Featured products fetched successfully", serialize_docs(products))


@router.get("/categories/all", response_model=SuccessResponse)
async def all_categories(db: AsyncIOMotorDatabase = Depends(get_database)):
    categories = await db.categories.find().sort("name", 1).to_list(length=None)
    return ok("Categories fetched successfully", serialize_docs(categories))


@router.get("/subcategories/all", response_model=SuccessResponse)
async def all_subcategories(db: AsyncIOMotorDatabase = Depends(get_database)):
    subcategories = await db.subcategories.find().to_list(length=None)
    category_names = await names_by_id(db.categories, {s["category_id"] for s in subcategories})
    for subcategory in subcategories:
        subcategory["category_name"] = category_names.get(subcategory["category_id"])

    subcategories.sort(key=lambda s: ((s["category_name"] or "").lower(), s["name"].lower()))
    return ok("Subcategories fetched successfully", serialize_docs(subcategories))


@router.get("/categories/{category_id}/subcategories", response_model=SuccessResponse)
async def category_subcategories(category_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    object_id = validate_object_id(category_id, "category")
    subcategories = await db.subcategories.find({"category_id": object_id}).sort("name", 1).to_list(length=None)
    return ok("Subcategories fetched successfully", serialize_docs(subcategories))


@router.get("/category/{category_id}", response_model=SuccessResponse)
async def products_by_category(
    category_id: str,
    paging: PageParams = Depends(),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    query = active_only({"category_id": validate_object_id(category_id, "category")})
    products, pagination = await find_products(db, query, paging.page, paging.limit)
    return ok("Products fetched successfully", {"products": products, "pagination": pagination})


@router.get("/subcategory/{subcategory_id}", response_model=SuccessResponse)
async def products_by_subcategory(
    subcategory_id: str,
    paging: PageParams = Depends(),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    query = active_only({"subcategory_id": validate_object_id(subcategory_id, "subcategory")})
    products, pagination = await find_products(db, query, paging.page, paging.limit)
    return ok("Products fetched successfully", {"products": products, "pagination": pagination})


@router.get("/{product_id}", response_model=SuccessResponse)
async def get_product(product_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Get a specific product by ID"""
    product = await verify_product_exists(product_id, db)
    await attach_category_names(db, [product])

    view = serialize_doc(product)
    view["details"] = await get_product_details(db, product["_id"])
    return ok("Product fetched successfully", view)


@router.get("/{product_id}/reviews", response_model=SuccessResponse)
async def product_reviews(product_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    await verify_product_exists(product_id, db)
    return ok("Reviews fetched successfully", {"reviews": [], "average_rating": 0, "total_reviews": 0})


@router.get("/{product_id}/related", response_model=SuccessResponse)
async def get_related_products(
    product_id: str,
    limit: int = Query(4, ge=1, le=20),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    product = await verify_product_exists(product_id, db)
    return ok("Related products fetched successfully", await related_products(db, product, limit))
