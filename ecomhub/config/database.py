"""
MongoDB connection lifecycle and the collection indexes the API relies on.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

IndexKeys = Union[str, List[Tuple[str, int]]]

# (collection, keys, options)
INDEXES: List[Tuple[str, IndexKeys, Dict[str, Any]]] = [
    ("customers", "email", {"unique": True}),
    ("customers", "phone", {"unique": True}),
    ("categories", "name", {}),
    ("subcategories", "category_id", {}),
    ("products", [("status", ASCENDING), ("created_at", DESCENDING)], {}),
    ("products", "category_id", {}),
    ("products", "subcategory_id", {}),
    ("products", "featured", {}),
    ("product_details", "product_id", {"unique": True}),
    ("cart", [("customer_id", ASCENDING), ("product_id", ASCENDING)], {"unique": True}),
    ("wishlist", [("customer_id", ASCENDING), ("product_id", ASCENDING)], {"unique": True}),
    ("customer_addresses", [("customer_id", ASCENDING), ("is_default", DESCENDING)], {}),
    ("orders", "order_number", {"unique": True}),
    ("orders", "status", {}),
    ("orders", [("customer_id", ASCENDING), ("created_at", DESCENDING)], {}),
    ("order_payments", "razorpay_order_id", {}),
    ("order_payments", "order_id", {}),
    ("users", "email", {"unique": True}),
    ("roles", "role_name", {"unique": True}),
    ("user_roles", [("user_id", ASCENDING), ("role_id", ASCENDING)], {"unique": True}),
    ("blacklisted_tokens", "token", {}),
    # Mongo drops revoked tokens once they would have expired anyway
    ("blacklisted_tokens", "expires_at", {"expireAfterSeconds": 0}),
]


def client_options(settings: Settings) -> Dict[str, Any]:
    return {
        "serverSelectionTimeoutMS": settings.server_selection_timeout_ms,
        "connectTimeoutMS": settings.connect_timeout_ms,
        "socketTimeoutMS": settings.socket_timeout_ms,
        "maxPoolSize": settings.max_pool_size,
        "minPoolSize": settings.min_pool_size,
        "retryWrites": settings.retry_writes,
        "directConnection": settings.direct_connection,
    }


class DatabaseManager:
    """Owns the Motor client for the lifetime of the application."""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> None:
        """
        Open the client and ping the server.

        A failed connection is logged, not raised: the process keeps serving
        /health and every database route answers 503.
        """
        settings = get_settings()
        logger.info(f"🚀 Connecting to MongoDB database '{settings.database_name}'...")
        try:
            self.client = AsyncIOMotorClient(settings.mongodb_url, **client_options(settings))
            await self.client.admin.command("ping")
        except Exception as db_error:
            logger.warning(f"⚠️  MongoDB connection failed: {db_error}")
            self.database = None
            return

        self.database = self.client[settings.database_name]
        logger.info("✅ Connected to MongoDB successfully")

    async def disconnect(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("🔌 MongoDB connection closed")
        self.client = None
        self.database = None

    async def create_indexes(self) -> None:
        if self.database is None:
            logger.warning("Database not connected, skipping index creation")
            return

        for collection, keys, options in INDEXES:
            try:
                await self.database[collection].create_index(keys, **options)
            except Exception as index_error:
                logger.warning(f"⚠️  Failed to create index {keys} on {collection}: {index_error}")
        logger.info(f"✅ Ensured {len(INDEXES)} database indexes")

    async def ping(self) -> bool:
        if self.database is None:
            return False
        try:
            await self.database.command("ping")
        except Exception as e:
            logger.warning(f"Database ping failed: {e}")
            return False
        return True

    def get_database(self) -> AsyncIOMotorDatabase:
        if self.database is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self.database

    def is_connected(self) -> bool:
        return self.database is not None


db_manager = DatabaseManager()


async def get_database() -> AsyncIOMotorDatabase:
    """FastAPI dependency returning the connected database, or 503."""
    if not db_manager.is_connected():
        raise HTTPException(
            status_code=503,
            detail="Database connection not available. Please check your MongoDB connection."
        )
    return db_manager.get_database()


def get_database_manager() -> DatabaseManager:
    return db_manager
