"""
Staff user management.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...config.database import get_database
from ...schemas.admin import CreateUserRequest, UpdateUserRequest
from ...schemas.common import SuccessResponse, ok
from ...utils.dependencies import validate_object_id
from ...utils.security import hash_password, load_role_names, require_admin
from ...utils.serializers import serialize_doc, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Admin Users"], dependencies=[Depends(require_admin)])


async def user_view(db: AsyncIOMotorDatabase, user: Dict[str, Any]) -> Dict[str, Any]:
    view = serialize_doc(user)
    view["roles"] = await load_role_names(db, user["_id"])
    return view


async def create_staff_user(db: AsyncIOMotorDatabase, request: CreateUserRequest) -> Dict[str, Any]:
    """Insert a staff user and optionally assign its first role."""
    if await db.users.find_one({"email": request.email}):
        raise HTTPException(status_code=400, detail="User with this email already exists")

    role_id = None
    if request.role_id:
        role_id = validate_object_id(request.role_id, "role")
        if not await db.roles.find_one({"_id": role_id}):
            raise HTTPException(status_code=404, detail="Role not found")

    now = utcnow()
    result = await db.users.insert_one({
        "name": request.name,
        "email": request.email,
        "phone": request.phone,
        "password": hash_password(request.password),
        "status": request.status,
        "created_at": now,
        "updated_at": now,
    })
    if role_id:
        await db.user_roles.insert_one({"user_id": result.inserted_id, "role_id": role_id, "assigned_at": now})

    logger.info(f"Staff user created: {request.email} (ID: {result.inserted_id})")
    return await user_view(db, await db.users.find_one({"_id": result.inserted_id}))


async def _get_user(db: AsyncIOMotorDatabase, user_id: str) -> Dict[str, Any]:
    user = await db.users.find_one({"_id": validate_object_id(user_id, "user")})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/", response_model=SuccessResponse)
async def list_users(db: AsyncIOMotorDatabase = Depends(get_database)):
    users = await db.users.find().sort("created_at", -1).to_list(length=None)
    return ok("Users fetched successfully", [await user_view(db, user) for user in users])


@router.get("/{user_id}", response_model=SuccessResponse)
async def get_user(user_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    return ok("User fetched successfully", await user_view(db, await _get_user(db, user_id)))


@router.put("/{user_id}", response_model=SuccessResponse)
async def update_user(user_id: str, request: UpdateUserRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    user = await _get_user(db, user_id)

    update_doc = request.model_dump(exclude_none=True, exclude={"password"})
    if request.email and await db.users.find_one({"email": request.email, "_id": {"$ne": user["_id"]}}):
        raise HTTPException(status_code=400, detail="User with this email already exists")
    if request.password:
        update_doc["password"] = hash_password(request.password)
    update_doc["updated_at"] = utcnow()

    await db.users.update_one({"_id": user["_id"]}, {"$set": update_doc})
    logger.info(f"Staff user updated: {user_id}")
    return ok("User updated successfully", await user_view(db, await db.users.find_one({"_id": user["_id"]})))


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(user_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    user = await _get_user(db, user_id)
    await db.user_roles.delete_many({"user_id": user["_id"]})
    await db.users.delete_one({"_id": user["_id"]})
    logger.info(f"Staff user deleted: {user_id}")
    return ok("User deleted successfully")
