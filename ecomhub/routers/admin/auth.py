"""
Staff authentication for the admin dashboard.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...config.database import get_database
from ...schemas.admin import AdminLoginRequest, CreateUserRequest
from ...schemas.common import SuccessResponse, ok
from ...utils.rate_limit import auth_limiter
from ...utils.security import (
    AuthenticatedAdmin,
    blacklist_token,
    create_admin_token,
    get_current_admin,
    load_role_names,
    require_admin,
    verify_password,
)
from .users import create_staff_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Admin Auth"])


@router.post("/login", dependencies=[Depends(auth_limiter)])
async def login(credentials: AdminLoginRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    user = await db.users.find_one({"email": credentials.email})
    if not user or not verify_password(credentials.password, user.get("password")):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if user.get("status", "active") != "active":
        raise HTTPException(status_code=403, detail="Account is inactive")

    user_id = str(user["_id"])
    logger.info(f"Staff user logged in: {user['email']}")
    return {
        "success": True,
        "message": "Login successful",
        "token": create_admin_token(user_id, user["email"], credentials.remember_me),
        "user": {
            "id": user_id,
            "name": user.get("name"),
            "email": user["email"],
            "roles": await load_role_names(db, user["_id"]),
        },
    }


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    admin: AuthenticatedAdmin = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    await blacklist_token(db, admin.token, admin.expires_at)
    logger.info(f"Staff user logged out: {admin.email}")
    return ok("Logout successful")


@router.post("/validate-token", response_model=SuccessResponse)
async def validate_token(admin: AuthenticatedAdmin = Depends(get_current_admin)):
    return ok("Token is valid", {
        "valid": True,
        "user": {"id": admin.id, "name": admin.name, "email": admin.email, "roles": admin.roles},
    })


@router.post("/register", status_code=201, response_model=SuccessResponse)
async def register(
    request: CreateUserRequest,
    admin: AuthenticatedAdmin = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    user = await create_staff_user(db, request)
    logger.info(f"Staff user {user['email']} registered by {admin.email}")
    return ok("User registered successfully", user)
