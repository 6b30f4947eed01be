"""
MongoDB Service helpers - shared by every collection service.

- ObjectId <-> str conversion for JSON responses
- Safe parsing of ids that arrive in URLs
"""

from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId

from placement_cell.core.exceptions import NotFoundError


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert MongoDB document (including nested lists/dicts) to JSON-serializable dict."""
    if doc is None:
        return None
    return {key: _serialize_value(value) for key, value in doc.items()}


def _serialize_value(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return serialize_doc(value)
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def serialize_docs(docs: list) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def to_object_id(value: str, what: str = "Document") -> ObjectId:
    """
    Parse an id coming from a request.

    A malformed id can never match a stored document, so it is reported as
    not found rather than as a server error.
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(f"{what} not found.")
