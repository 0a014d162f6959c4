"""
Password hashing, JWT issuing and the authentication dependencies.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import bcrypt
import jwt
from bson import ObjectId
from fastapi import Depends, Header, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel

from ..config.database import get_database
from ..config.settings import get_settings
from .serializers import utcnow

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"
ADMIN = "admin"


class TokenError(Exception):
    """Raised when a token cannot be decoded or has the wrong type."""


def hash_password(password: str) -> str:
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def _secret_for(kind: str) -> str:
    settings = get_settings()
    return {
        ACCESS: settings.jwt_secret,
        REFRESH: settings.jwt_refresh_secret,
        ADMIN: settings.jwt_admin_secret,
    }[kind]


def _encode(claims: Dict[str, Any], kind: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "type": kind,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, _secret_for(kind), algorithm=get_settings().jwt_algorithm)


def create_access_token(customer_id: str, email: str) -> str:
    minutes = get_settings().access_token_minutes
    return _encode({"id": customer_id, "email": email}, ACCESS, timedelta(minutes=minutes))


def create_refresh_token(customer_id: str, email: str) -> str:
    days = get_settings().refresh_token_days
    return _encode({"id": customer_id, "email": email}, REFRESH, timedelta(days=days))


def create_admin_token(user_id: str, email: str, remember_me: bool = False) -> str:
    settings = get_settings()
    lifetime = (
        timedelta(days=settings.admin_remember_me_days)
        if remember_me
        else timedelta(hours=settings.admin_token_hours)
    )
    return _encode({"id": user_id, "email": email}, ADMIN, lifetime)


def decode_token(token: str, kind: str) -> Dict[str, Any]:
    """
    Decode and validate a token of the given kind.

    Raises:
        TokenError: bad signature, expired, malformed or wrong token type
    """
    try:
        payload = jwt.decode(token, _secret_for(kind), algorithms=[get_settings().jwt_algorithm])
    except jwt.PyJWTError as e:
        raise TokenError(str(e)) from e

    if payload.get("type") != kind:
        raise TokenError(f"Expected a {kind} token")
    if not ObjectId.is_valid(str(payload.get("id", ""))):
        raise TokenError("Token subject is not a valid id")
    return payload


def token_expiry(payload: Dict[str, Any]) -> datetime:
    return datetime.fromtimestamp(payload["exp"], tz=timezone.utc).replace(tzinfo=None)


# Blacklist

async def blacklist_token(db: AsyncIOMotorDatabase, token: str, expires_at: datetime) -> None:
    await db.blacklisted_tokens.update_one(
        {"token": token},
        {"$set": {"token": token, "expires_at": expires_at, "created_at": utcnow()}},
        upsert=True,
    )


async def is_token_blacklisted(db: AsyncIOMotorDatabase, token: str) -> bool:
    return await db.blacklisted_tokens.find_one({"token": token}) is not None


# Request authentication

class AuthenticatedCustomer(BaseModel):
    id: str
    email: str
    token: str
    expires_at: datetime

    @property
    def object_id(self) -> ObjectId:
        return ObjectId(self.id)


class AuthenticatedAdmin(BaseModel):
    id: str
    email: str
    name: str
    roles: List[str] = []
    token: str
    expires_at: datetime

    @property
    def object_id(self) -> ObjectId:
        return ObjectId(self.id)

    def has_any_role(self, *names: str) -> bool:
        wanted = {name.lower() for name in names}
        return any(role.lower() in wanted for role in self.roles)


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization token missing")

    parts = authorization.split(" ")
    if len(parts) < 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise HTTPException(status_code=401, detail="Invalid token format")
    return parts[1]


async def _decode_request_token(db: AsyncIOMotorDatabase, authorization: Optional[str], kind: str):
    token = extract_bearer_token(authorization)

    try:
        payload = decode_token(token, kind)
    except TokenError as e:
        logger.info(f"Rejected {kind} token: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if await is_token_blacklisted(db, token):
        raise HTTPException(status_code=401, detail="Token has been revoked")

    return token, payload


async def get_current_customer(
    authorization: Optional[str] = Header(None),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> AuthenticatedCustomer:
    """Dependency resolving the customer behind the bearer token."""
    token, payload = await _decode_request_token(db, authorization, ACCESS)
    return AuthenticatedCustomer(
        id=payload["id"],
        email=payload.get("email", ""),
        token=token,
        expires_at=token_expiry(payload),
    )


async def load_role_names(db: AsyncIOMotorDatabase, user_id: ObjectId) -> List[str]:
    assignments = await db.user_roles.find({"user_id": user_id}).to_list(length=None)
    role_ids = [assignment["role_id"] for assignment in assignments]
    if not role_ids:
        return []
    roles = await db.roles.find({"_id": {"$in": role_ids}}).to_list(length=None)
    return sorted(role["role_name"] for role in roles)


async def get_current_admin(
    authorization: Optional[str] = Header(None),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> AuthenticatedAdmin:
    """Dependency resolving the staff user behind an admin bearer token."""
    token, payload = await _decode_request_token(db, authorization, ADMIN)

    user = await db.users.find_one({"_id": ObjectId(payload["id"])})
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    if user.get("status", "active") != "active":
        raise HTTPException(status_code=403, detail="Account is inactive")

    return AuthenticatedAdmin(
        id=str(user["_id"]),
        email=user["email"],
        name=user.get("name", ""),
        roles=await load_role_names(db, user["_id"]),
        token=token,
        expires_at=token_expiry(payload),
    )


def require_roles(*role_names: str):
    """Dependency factory restricting a route to staff holding one of the roles."""

    async def checker(admin: AuthenticatedAdmin = Depends(get_current_admin)) -> AuthenticatedAdmin:
        if not admin.has_any_role(*role_names):
            raise HTTPException(status_code=403, detail="Access denied. Admin privileges required.")
        return admin

    return checker


# Staff able to manage users, roles and role assignments
require_admin = require_roles("admin", "super_admin")
