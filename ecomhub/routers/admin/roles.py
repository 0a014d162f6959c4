"""
Roles and the assignment of roles to staff users.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from ...config.database import get_database
from ...schemas.admin import AssignRoleRequest, RoleRequest, UpdateRoleAssignmentRequest
from ...schemas.common import SuccessResponse, ok
from ...services.catalog import names_by_id
from ...utils.dependencies import validate_object_id
from ...utils.security import require_admin
from ...utils.serializers import serialize_doc, serialize_docs, utcnow

logger = logging.getLogger(__name__)

roles_router = APIRouter(prefix="/roles", tags=["Admin Roles"], dependencies=[Depends(require_admin)])
user_roles_router = APIRouter(prefix="/user-roles", tags=["Admin Roles"], dependencies=[Depends(require_admin)])


def _same_name(role_name: str) -> Dict[str, Any]:
    return {"role_name": {"$regex": f"^{re.escape(role_name)}$", "$options": "i"}}


async def _get_role(db: AsyncIOMotorDatabase, role_id: str) -> Dict[str, Any]:
    role = await db.roles.find_one({"_id": validate_object_id(role_id, "role")})
    if not role:
        raise HTTPException(status_code=404, detail="Role not found")
    return role


# Roles

@roles_router.get("/", response_model=SuccessResponse)
async def list_roles(db: AsyncIOMotorDatabase = Depends(get_database)):
    roles = await db.roles.find().sort("role_name", 1).to_list(length=None)
    return ok("Roles fetched successfully", serialize_docs(roles))


@roles_router.get("/{role_id}", response_model=SuccessResponse)
async def get_role(role_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    return ok("Role fetched successfully", serialize_doc(await _get_role(db, role_id)))


@roles_router.post("/", status_code=201, response_model=SuccessResponse)
async def create_role(request: RoleRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    if await db.roles.find_one(_same_name(request.role_name)):
        raise HTTPException(status_code=400, detail="Role with this name already exists")

    now = utcnow()
    result = await db.roles.insert_one({**request.model_dump(), "created_at": now, "updated_at": now})
    logger.info(f"Role created: {request.role_name} (ID: {result.inserted_id})")
    return ok("Role created successfully", serialize_doc(await db.roles.find_one({"_id": result.inserted_id})))


@roles_router.put("/{role_id}", response_model=SuccessResponse)
async def update_role(role_id: str, request: RoleRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    role = await _get_role(db, role_id)
    if await db.roles.find_one({**_same_name(request.role_name), "_id": {"$ne": role["_id"]}}):
        raise HTTPException(status_code=400, detail="Role with this name already exists")

    await db.roles.update_one({"_id": role["_id"]}, {"$set": {**request.model_dump(), "updated_at": utcnow()}})
    logger.info(f"Role updated: {role_id}")
    return ok("Role updated successfully", serialize_doc(await db.roles.find_one({"_id": role["_id"]})))


@roles_router.delete("/{role_id}", response_model=SuccessResponse)
async def delete_role(role_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    role = await _get_role(db, role_id)
    await db.user_roles.delete_many({"role_id": role["_id"]})
    await db.roles.delete_one({"_id": role["_id"]})
    logger.info(f"Role deleted: {role_id}")
    return ok("Role deleted successfully")


# Role assignments

async def _assignment_views(db: AsyncIOMotorDatabase, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    assignments = await db.user_roles.find(query or {}).sort("assigned_at", -1).to_list(length=None)
    users = {
        u["_id"]: u
        for u in await db.users.find({"_id": {"$in": [a["user_id"] for a in assignments]}}).to_list(length=None)
    }
    role_names = await names_by_id(db.roles, {a["role_id"] for a in assignments}, field="role_name")

    views = []
    for assignment in assignments:
        user = users.get(assignment["user_id"], {})
        view = serialize_doc(assignment)
        view.update({
            "user_name": user.get("name"),
            "user_email": user.get("email"),
            "role_name": role_names.get(assignment["role_id"]),
        })
        views.append(view)
    return views


async def _check_user_and_role(db: AsyncIOMotorDatabase, user_id: ObjectId, role_id: ObjectId) -> None:
    if not await db.users.find_one({"_id": user_id}):
        raise HTTPException(status_code=404, detail="User not found")
    if not await db.roles.find_one({"_id": role_id}):
        raise HTTPException(status_code=404, detail="Role not found")


@user_roles_router.get("/", response_model=SuccessResponse)
async def list_assignments(db: AsyncIOMotorDatabase = Depends(get_database)):
    return ok("Role assignments fetched successfully", await _assignment_views(db))


@user_roles_router.post("/assign", status_code=201, response_model=SuccessResponse)
async def assign_role(request: AssignRoleRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    user_id = validate_object_id(request.user_id, "user")
    role_id = validate_object_id(request.role_id, "role")
    await _check_user_and_role(db, user_id, role_id)

    if await db.user_roles.find_one({"user_id": user_id, "role_id": role_id}):
        raise HTTPException(status_code=400, detail="Role already assigned to this user")

    try:
        await db.user_roles.insert_one({"user_id": user_id, "role_id": role_id, "assigned_at": utcnow()})
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Role already assigned to this user")

    logger.info(f"Role {role_id} assigned to user {user_id}")
    return ok("Role assigned successfully")


@user_roles_router.put("/update", response_model=SuccessResponse)
async def update_assignment(request: UpdateRoleAssignmentRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    user_id = validate_object_id(request.user_id, "user")
    old_role_id = validate_object_id(request.old_role_id, "role")
    new_role_id = validate_object_id(request.new_role_id, "role")
    await _check_user_and_role(db, user_id, new_role_id)

    assignment = await db.user_roles.find_one({"user_id": user_id, "role_id": old_role_id})
    if not assignment:
        raise HTTPException(status_code=404, detail="Role assignment not found")
    if old_role_id != new_role_id and await db.user_roles.find_one({"user_id": user_id, "role_id": new_role_id}):
        raise HTTPException(status_code=400, detail="Role already assigned to this user")

    await db.user_roles.update_one(
        {"_id": assignment["_id"]},
        {"$set": {"role_id": new_role_id, "assigned_at": utcnow()}},
    )
    logger.info(f"Role of user {user_id} changed from {old_role_id} to {new_role_id}")
    return ok("Role assignment updated successfully")


@user_roles_router.delete("/{user_id}/{role_id}", response_model=SuccessResponse)
async def remove_assignment(user_id: str, role_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    result = await db.user_roles.delete_one({
        "user_id": validate_object_id(user_id, "user"),
        "role_id": validate_object_id(role_id, "role"),
    })
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Role assignment not found")
    return ok("Role assignment removed successfully")


@user_roles_router.get("/user/{user_id}", response_model=SuccessResponse)
async def user_assignments(user_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    views = await _assignment_views(db, {"user_id": validate_object_id(user_id, "user")})
    return ok("Role assignments fetched successfully", views)


@user_roles_router.get("/role/{role_id}", response_model=SuccessResponse)
async def role_assignments(role_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    views = await _assignment_views(db, {"role_id": validate_object_id(role_id, "role")})
    return ok("Role assignments fetched successfully", views)
