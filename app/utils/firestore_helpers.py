"""
Firestore helpers shared by the services.

NOTE: For firebase_admin SDK, we use positional arguments in where() which
still work. The FieldFilter deprecation warning is just a warning.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

logger = logging.getLogger(__name__)


def where_filter(query, field_path: str, op_string: str, value):
    """
    Helper function for Firestore queries.

    Usage:
        query = where_filter(collection, "userType", "==", "user")
        query = where_filter(query, "geoLocation.type", "==", "Point")
    """
    return query.where(field_path, op_string, value)


def to_datetime(value: Any) -> datetime:
    """
    Convert a Firestore timestamp value to a timezone-aware datetime.

    Firestore returns DatetimeWithNanoseconds (a datetime subclass); older
    documents may hold ISO strings or epoch milliseconds.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if hasattr(value, "to_datetime"):
        return to_datetime(value.to_datetime())
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        return to_datetime(datetime.fromisoformat(value.replace("Z", "+00:00")))
    logger.warning(f"Unknown timestamp type: {type(value)}, using current time")
    return datetime.now(timezone.utc)


def snapshot_to_dict(doc) -> Dict:
    """Document snapshot as a dict with its ID under "id"."""
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data
