"""
MongoDB document serialization utilities
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId

# Fields that must never leave the API
PRIVATE_FIELDS = ("password",)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what BSON round-trips."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def convert_object_ids(doc: Any) -> Any:
    """
    Recursively convert ObjectId instances to strings in a document
    Useful for nested documents or complex structures

    Args:
        doc: Document that may contain ObjectIds at any level

    Returns:
        Document with all ObjectIds converted to strings
    """
    if isinstance(doc, dict):
        return {key: convert_object_ids(value) for key, value in doc.items()}
    elif isinstance(doc, list):
        return [convert_object_ids(item) for item in doc]
    elif isinstance(doc, ObjectId):
        return str(doc)
    else:
        return doc


def serialize_doc(doc: Optional[Dict[str, Any]], exclude: Iterable[str] = PRIVATE_FIELDS) -> Optional[Dict[str, Any]]:
    """
    Convert a MongoDB document into a JSON-ready dict.

    ``_id`` is exposed as ``id``, nested ObjectIds become strings and
    private fields are dropped.

    Args:
        doc: MongoDB document dictionary
        exclude: Field names to drop from the output

    Returns:
        Serialized document, or None if input is None
    """
    if doc is None:
        return None

    # Create a copy to avoid modifying the original document
    serialized_doc = {key: value for key, value in doc.items() if key not in exclude}

    if "_id" in serialized_doc:
        serialized_doc = {"id": serialized_doc.pop("_id"), **serialized_doc}

    return convert_object_ids(serialized_doc)


def serialize_docs(docs: List[Dict[str, Any]], exclude: Iterable[str] = PRIVATE_FIELDS) -> List[Dict[str, Any]]:
    """
    Serialize a list of MongoDB documents

    Args:
        docs: List of MongoDB document dictionaries
        exclude: Field names to drop from every document

    Returns:
        List of serialized documents
    """
    return [serialize_doc(doc, exclude) for doc in docs if doc is not None]
