"""
Saved shipping addresses of the authenticated customer.
"""
import logging

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config.database import get_database
from ..schemas.address import AddressRequest
from ..schemas.common import SuccessResponse, ok
from ..services.addresses import clear_default, promote_newest
from ..utils.dependencies import verify_owned
from ..utils.rate_limit import general_limiter
from ..utils.security import AuthenticatedCustomer, get_current_customer
from ..utils.serializers import serialize_doc, serialize_docs, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/addresses", tags=["Addresses"], dependencies=[Depends(general_limiter)])


async def _owned_address(db, address_id: str, customer: AuthenticatedCustomer):
    return await verify_owned(db.customer_addresses, address_id, customer.object_id, "address", "Address not found")


@router.get("/", response_model=SuccessResponse)
async def list_addresses(
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    cursor = db.customer_addresses.find({"customer_id": customer.object_id}).sort(
        [("is_default", -1), ("created_at", -1)]
    )
    return ok("Addresses fetched successfully", serialize_docs(await cursor.to_list(length=None)))


@router.get("/default", response_model=SuccessResponse)
async def default_address(
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    address = await db.customer_addresses.find_one({"customer_id": customer.object_id, "is_default": True})
    return ok("Default address fetched successfully", serialize_doc(address))


@router.get("/{address_id}", response_model=SuccessResponse)
async def get_address(
    address_id: str,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    return ok("Address fetched successfully", serialize_doc(await _owned_address(db, address_id, customer)))


@router.post("/", status_code=201, response_model=SuccessResponse)
async def create_address(
    request: AddressRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """The first address a customer saves becomes the default."""
    has_addresses = await db.customer_addresses.count_documents({"customer_id": customer.object_id}) > 0
    is_default = request.is_default or not has_addresses
    if is_default:
        await clear_default(db, customer.object_id)

    now = utcnow()
    result = await db.customer_addresses.insert_one({
        **request.model_dump(),
        "is_default": is_default,
        "customer_id": customer.object_id,
        "created_at": now,
        "updated_at": now,
    })

    logger.info(f"Address created: {result.inserted_id} for customer {customer.id}")
    return ok("Address added successfully", {"address_id": str(result.inserted_id)})


@router.put("/{address_id}", response_model=SuccessResponse)
async def update_address(
    address_id: str,
    request: AddressRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    address = await _owned_address(db, address_id, customer)

    # Unsetting the only default would leave the customer without one
    is_default = request.is_default or address.get("is_default", False)
    if request.is_default:
        await clear_default(db, customer.object_id)

    await db.customer_addresses.update_one(
        {"_id": address["_id"]},
        {"$set": {**request.model_dump(), "is_default": is_default, "updated_at": utcnow()}},
    )
    return ok("Address updated successfully")


@router.delete("/{address_id}", response_model=SuccessResponse)
async def delete_address(
    address_id: str,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    address = await _owned_address(db, address_id, customer)
    await db.customer_addresses.delete_one({"_id": address["_id"]})
    if address.get("is_default"):
        await promote_newest(db, customer.object_id)

    logger.info(f"Address deleted: {address_id} for customer {customer.id}")
    return ok("Address deleted successfully")


@router.put("/{address_id}/set-default", response_model=SuccessResponse)
async def set_default(
    address_id: str,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    address = await _owned_address(db, address_id, customer)
    await clear_default(db, customer.object_id)
    await db.customer_addresses.update_one(
        {"_id": address["_id"]},
        {"$set": {"is_default": True, "updated_at": utcnow()}},
    )
    return ok("Default address updated successfully")
