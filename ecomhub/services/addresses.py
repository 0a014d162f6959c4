"""
Customer address helpers.
"""
from typing import Any, Dict

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..utils.serializers import utcnow


def format_address(address: Dict[str, Any]) -> str:
    """Render an address document in multi-line postal form."""
    lines = [address.get("name"), address.get("address_line_1"), address.get("address_line_2")]
    if address.get("landmark"):
        lines.append(f"Landmark: {address['landmark']}")
    lines.append(f"{address.get('city')}, {address.get('state')} - {address.get('pincode')}")
    lines.append(f"Phone: {address.get('phone')}")
    return "\n".join(line for line in lines if line)


async def clear_default(db: AsyncIOMotorDatabase, customer_id: ObjectId) -> None:
    await db.customer_addresses.update_many(
        {"customer_id": customer_id, "is_default": True},
        {"$set": {"is_default": False, "updated_at": utcnow()}},
    )


async def promote_newest(db: AsyncIOMotorDatabase, customer_id: ObjectId) -> None:
    """Make the most recent address the default when none is."""
    if await db.customer_addresses.find_one({"customer_id": customer_id, "is_default": True}):
        return
    newest = await db.customer_addresses.find({"customer_id": customer_id}).sort("created_at", -1).to_list(length=1)
    if newest:
        await db.customer_addresses.update_one({"_id": newest[0]["_id"]}, {"$set": {"is_default": True}})
