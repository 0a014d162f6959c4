"""
Catalog administration: categories, subcategories, products and product
details.
"""
import logging
import re
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...config.database import get_database
from ...models.product import ProductDetailsDocument, ProductDocument
from ...schemas.common import SuccessResponse, ok
from ...schemas.product import (
    CategoryRequest,
    CreateProductRequest,
    ProductDetailsFields,
    ProductDetailsRequest,
    SubcategoryRequest,
    UpdateProductRequest,
)
from ...services.catalog import attach_category_names, find_products, names_by_id, text_search
from ...utils.dependencies import AdminPageParams, validate_object_id
from ...utils.security import get_current_admin
from ...utils.serializers import serialize_doc, serialize_docs, utcnow

logger = logging.getLogger(__name__)

staff_only = [Depends(get_current_admin)]
categories_router = APIRouter(prefix="/categories", tags=["Admin Catalog"], dependencies=staff_only)
subcategories_router = APIRouter(prefix="/subcategories", tags=["Admin Catalog"], dependencies=staff_only)
products_router = APIRouter(prefix="/products", tags=["Admin Catalog"], dependencies=staff_only)
details_router = APIRouter(prefix="/product-details", tags=["Admin Catalog"], dependencies=staff_only)


def _same_name(name: str) -> Dict[str, Any]:
    return {"name": {"$regex": f"^{re.escape(name)}$", "$options": "i"}}


async def _get(collection, object_id: str, resource_name: str) -> Dict[str, Any]:
    doc = await collection.find_one({"_id": validate_object_id(object_id, resource_name)})
    if not doc:
        raise HTTPException(status_code=404, detail=f"{resource_name.capitalize()} not found")
    return doc


# Categories

@categories_router.get("/", response_model=SuccessResponse)
async def list_categories(db: AsyncIOMotorDatabase = Depends(get_database)):
    categories = await db.categories.find().sort("name", 1).to_list(length=None)
    views = []
    for category in categories:
        view = serialize_doc(category)
        view["subcategory_count"] = await db.subcategories.count_documents({"category_id": category["_id"]})
        view["product_count"] = await db.products.count_documents({"category_id": category["_id"]})
        views.append(view)
    return ok("Categories fetched successfully", views)


@categories_router.get("/{category_id}", response_model=SuccessResponse)
async def get_category(category_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    return ok("Category fetched successfully", serialize_doc(await _get(db.categories, category_id, "category")))


@categories_router.post("/", status_code=201, response_model=SuccessResponse)
async def create_category(request: CategoryRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    if await db.categories.find_one(_same_name(request.name)):
        raise HTTPException(status_code=400, detail="Category with this name already exists")

    now = utcnow()
    result = await db.categories.insert_one({**request.model_dump(), "created_at": now, "updated_at": now})
    logger.info(f"Category created: {request.name} (ID: {result.inserted_id})")
    return ok("Category created successfully", serialize_doc(await db.categories.find_one({"_id": result.inserted_id})))


@categories_router.put("/{category_id}", response_model=SuccessResponse)
async def update_category(category_id: str, request: CategoryRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    category = await _get(db.categories, category_id, "category")
    if await db.categories.find_one({**_same_name(request.name), "_id": {"$ne": category["_id"]}}):
        raise HTTPException(status_code=400, detail="Category with this name already exists")

    await db.categories.update_one({"_id": category["_id"]}, {"$set": {**request.model_dump(), "updated_at": utcnow()}})
    logger.info(f"Category updated: {category_id}")
    return ok("Category updated successfully", serialize_doc(await db.categories.find_one({"_id": category["_id"]})))


@categories_router.delete("/{category_id}", response_model=SuccessResponse)
async def delete_category(category_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    category = await _get(db.categories, category_id, "category")
    if await db.subcategories.count_documents({"category_id": category["_id"]}):
        raise HTTPException(status_code=400, detail="Cannot delete category with existing subcategories")
    if await db.products.count_documents({"category_id": category["_id"]}):
        raise HTTPException(status_code=400, detail="Cannot delete category with existing products")

    await db.categories.delete_one({"_id": category["_id"]})
    logger.info(f"Category deleted: {category_id}")
    return ok("Category deleted successfully")


# Subcategories

@subcategories_router.get("/", response_model=SuccessResponse)
async def list_subcategories(
    category_id: Optional[str] = Query(None, description="Filter by category"),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    query = {"category_id": validate_object_id(category_id, "category")} if category_id else {}
    subcategories = await db.subcategories.find(query).sort("name", 1).to_list(length=None)
    category_names = await names_by_id(db.categories, {s["category_id"] for s in subcategories})
    for subcategory in subcategories:
        subcategory["category_name"] = category_names.get(subcategory["category_id"])
    return ok("Subcategories fetched successfully", serialize_docs(subcategories))


@subcategories_router.get("/{subcategory_id}", response_model=SuccessResponse)
async def get_subcategory(subcategory_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    subcategory = await _get(db.subcategories, subcategory_id, "subcategory")
    return ok("Subcategory fetched successfully", serialize_doc(subcategory))


@subcategories_router.post("/", status_code=201, response_model=SuccessResponse)
async def create_subcategory(request: SubcategoryRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    category = await _get(db.categories, request.category_id, "category")

    now = utcnow()
    result = await db.subcategories.insert_one({
        "name": request.name,
        "description": request.description,
        "category_id": category["_id"],
        "created_at": now,
        "updated_at": now,
    })
    logger.info(f"Subcategory created: {request.name} (ID: {result.inserted_id})")
    created = await db.subcategories.find_one({"_id": result.inserted_id})
    return ok("Subcategory created successfully", serialize_doc(created))


@subcategories_router.put("/{subcategory_id}", response_model=SuccessResponse)
async def update_subcategory(
    subcategory_id: str,
    request: SubcategoryRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    subcategory = await _get(db.subcategories, subcategory_id, "subcategory")
    category = await _get(db.categories, request.category_id, "category")

    await db.subcategories.update_one(
        {"_id": subcategory["_id"]},
        {"$set": {
            "name": request.name,
            "description": request.description,
            "category_id": category["_id"],
            "updated_at": utcnow(),
        }},
    )
    logger.info(f"Subcategory updated: {subcategory_id}")
    updated = await db.subcategories.find_one({"_id": subcategory["_id"]})
    return ok("Subcategory updated successfully", serialize_doc(updated))


@subcategories_router.delete("/{subcategory_id}", response_model=SuccessResponse)
async def delete_subcategory(subcategory_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    subcategory = await _get(db.subcategories, subcategory_id, "subcategory")
    if await db.products.count_documents({"subcategory_id": subcategory["_id"]}):
        raise HTTPException(status_code=400, detail="Cannot delete subcategory with existing products")

    await db.subcategories.delete_one({"_id": subcategory["_id"]})
    logger.info(f"Subcategory deleted: {subcategory_id}")
    return ok("Subcategory deleted successfully")


# Products

async def _category_refs(db: AsyncIOMotorDatabase, category_id: str, subcategory_id: Optional[str]) -> Dict[str, Any]:
    """Resolve category/subcategory ids, checking that the subcategory belongs to the category."""
    category = await _get(db.categories, category_id, "category")
    refs = {"category_id": category["_id"], "subcategory_id": None}
    if subcategory_id:
        subcategory = await _get(db.subcategories, subcategory_id, "subcategory")
        if subcategory["category_id"] != category["_id"]:
            raise HTTPException(status_code=400, detail="Subcategory does not belong to the selected category")
        refs["subcategory_id"] = subcategory["_id"]
    return refs


async def _product_view(db: AsyncIOMotorDatabase, product: Dict[str, Any]) -> Dict[str, Any]:
    await attach_category_names(db, [product])
    return serialize_doc(product)


@products_router.get("/", response_model=SuccessResponse)
async def list_products(
    paging: AdminPageParams = Depends(),
    status: Optional[str] = Query(None, description="active or inactive"),
    category_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Matches name or description"),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Products in any status, newest first"""
    query: Dict[str, Any] = {}
    if status and status != "all":
        query["status"] = status.lower()
    if category_id:
        query["category_id"] = validate_object_id(category_id, "category")
    if search:
        query.update(text_search(search.strip(), "name", "description"))

    products, pagination = await find_products(db, query, paging.page, paging.limit)
    return ok("Products fetched successfully", {"products": products, "pagination": pagination})


@products_router.get("/{product_id}", response_model=SuccessResponse)
async def get_product(product_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    product = await _get(db.products, product_id, "product")
    return ok("Product fetched successfully", await _product_view(db, product))


@products_router.post("/", status_code=201, response_model=SuccessResponse)
async def create_product(request: CreateProductRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Create a new product"""
    refs = await _category_refs(db, request.category_id, request.subcategory_id)
    product = ProductDocument(**{**request.model_dump(), **refs})

    result = await db.products.insert_one(product.model_dump())
    logger.info(f"Product created: {product.name} (ID: {result.inserted_id})")
    created = await db.products.find_one({"_id": result.inserted_id})
    return ok("Product created successfully", await _product_view(db, created))


@products_router.put("/{product_id}", response_model=SuccessResponse)
async def update_product(product_id: str, request: UpdateProductRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Update a product; only the supplied fields change"""
    product = await _get(db.products, product_id, "product")

    update_doc = request.model_dump(exclude_none=True, exclude={"category_id", "subcategory_id"})
    if request.category_id or request.subcategory_id:
        category_id = request.category_id or str(product["category_id"])
        update_doc.update(await _category_refs(db, category_id, request.subcategory_id))
    update_doc["updated_at"] = utcnow()

    await db.products.update_one({"_id": product["_id"]}, {"$set": update_doc})
    logger.info(f"Product updated: {product_id}")
    updated = await db.products.find_one({"_id": product["_id"]})
    return ok("Product updated successfully", await _product_view(db, updated))


@products_router.delete("/{product_id}", response_model=SuccessResponse)
async def delete_product(product_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Delete a product with its details and any cart or wishlist lines"""
    product = await _get(db.products, product_id, "product")

    await db.product_details.delete_many({"product_id": product["_id"]})
    await db.cart.delete_many({"product_id": product["_id"]})
    await db.wishlist.delete_many({"product_id": product["_id"]})
    await db.products.delete_one({"_id": product["_id"]})

    logger.info(f"Product deleted: {product_id}")
    return ok("Product deleted successfully")


# Product details

async def _write_details(db: AsyncIOMotorDatabase, product_id, fields: ProductDetailsFields, insert: bool):
    values = fields.model_dump(include=set(ProductDetailsFields.model_fields))
    if insert:
        details = ProductDetailsDocument(product_id=product_id, **{k: v for k, v in values.items() if v is not None})
        await db.product_details.insert_one(details.model_dump())
    else:
        await db.product_details.update_one(
            {"product_id": product_id},
            {"$set": {**{k: v for k, v in values.items() if v is not None}, "updated_at": utcnow()}},
        )
    return serialize_doc(await db.product_details.find_one({"product_id": product_id}))


@details_router.get("/", response_model=SuccessResponse)
async def list_details(db: AsyncIOMotorDatabase = Depends(get_database)):
    details = await db.product_details.find().sort("created_at", -1).to_list(length=None)
    names = await names_by_id(db.products, {d["product_id"] for d in details})
    for entry in details:
        entry["product_name"] = names.get(entry["product_id"])
    return ok("Product details fetched successfully", serialize_docs(details))


@details_router.get("/{product_id}", response_model=SuccessResponse)
async def get_details(product_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    details = await db.product_details.find_one({"product_id": validate_object_id(product_id, "product")})
    if not details:
        raise HTTPException(status_code=404, detail="Product details not found")
    return ok("Product details fetched successfully", serialize_doc(details))


@details_router.post("/", status_code=201, response_model=SuccessResponse)
async def create_details(request: ProductDetailsRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    product = await _get(db.products, request.product_id, "product")
    if await db.product_details.find_one({"product_id": product["_id"]}):
        raise HTTPException(status_code=400, detail="Product details already exist for this product")

    view = await _write_details(db, product["_id"], request, insert=True)
    logger.info(f"Product details created for product {request.product_id}")
    return ok("Product details created successfully", view)


@details_router.post("/upsert", response_model=SuccessResponse)
async def upsert_details(request: ProductDetailsRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    product = await _get(db.products, request.product_id, "product")
    exists = await db.product_details.find_one({"product_id": product["_id"]}) is not None

    view = await _write_details(db, product["_id"], request, insert=not exists)
    return ok("Product details updated successfully" if exists else "Product details created successfully", view)


@details_router.put("/{product_id}", response_model=SuccessResponse)
async def update_details(product_id: str, request: ProductDetailsFields, db: AsyncIOMotorDatabase = Depends(get_database)):
    object_id = validate_object_id(product_id, "product")
    if not await db.product_details.find_one({"product_id": object_id}):
        raise HTTPException(status_code=404, detail="Product details not found")

    view = await _write_details(db, object_id, request, insert=False)
    logger.info(f"Product details updated for product {product_id}")
    return ok("Product details updated successfully", view)


@details_router.delete("/{product_id}", response_model=SuccessResponse)
async def delete_details(product_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    result = await db.product_details.delete_one({"product_id": validate_object_id(product_id, "product")})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product details not found")
    return ok("Product details deleted successfully")
