"""
Startup seeding of the first staff account.
"""
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config.settings import Settings
from ..utils.security import hash_password
from ..utils.serializers import utcnow

logger = logging.getLogger(__name__)

SUPER_ADMIN_ROLE = "super_admin"


async def ensure_role(db: AsyncIOMotorDatabase, role_name: str, description: str):
    role = await db.roles.find_one({"role_name": role_name})
    if role:
        return role["_id"]
    now = utcnow()
    result = await db.roles.insert_one({
        "role_name": role_name,
        "description": description,
        "created_at": now,
        "updated_at": now,
    })
    logger.info(f"Role created: {role_name}")
    return result.inserted_id


async def bootstrap_admin(db: AsyncIOMotorDatabase, settings: Settings) -> bool:
    """
    Seed a super_admin role and one staff user when no staff users exist.

    Returns:
        True when a user was created
    """
    role_id = await ensure_role(db, SUPER_ADMIN_ROLE, "Full access to the admin dashboard")

    if await db.users.count_documents({}) > 0:
        return False
    if not (settings.bootstrap_admin_email and settings.bootstrap_admin_password):
        logger.warning("⚠️  No staff users exist and no bootstrap admin credentials are configured")
        return False

    now = utcnow()
    result = await db.users.insert_one({
        "name": settings.bootstrap_admin_name,
        "email": settings.bootstrap_admin_email.strip().lower(),
        "phone": None,
        "password": hash_password(settings.bootstrap_admin_password),
        "status": "active",
        "created_at": now,
        "updated_at": now,
    })
    await db.user_roles.insert_one({"user_id": result.inserted_id, "role_id": role_id, "assigned_at": now})
    logger.info(f"✅ Bootstrap admin created: {settings.bootstrap_admin_email}")
    return True
