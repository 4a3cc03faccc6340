# archive_backend/shared/utils.py

# This file contains common utility functions used across the backend.

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """MongoDB may hand back naive datetimes; those are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def serialize_document(value: Any) -> Any:
    """Recursively converts ObjectId values so a Mongo document is JSON-ready."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: serialize_document(item) for key, item in value.items()}
    if isinstance(value, list):
        return [serialize_document(item) for item in value]
    return value


def serialize_documents(documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_document(doc) for doc in documents]


def parse_page(raw: Optional[str]) -> int:
    """Page numbers are 1-based; anything unparsable or below 1 becomes 1."""
    try:
        page = int(raw) if raw is not None else 1
    except (TypeError, ValueError):
        return 1
    return max(page, 1)


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size > 0 else 0
