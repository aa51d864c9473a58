"""
Firestore query helpers.

NOTE: firebase_admin still accepts positional where() arguments; the
deprecation warning does not affect functionality.
"""

from datetime import datetime, timezone
from typing import Any, Dict


def where_filter(query, field_path: str, op_string: str, value):
    """
    Usage:
        query = where_filter(collection, "assigned_office", "==", office)
        query = where_filter(query, "report_id", "==", 5)
    """
    return query.where(field_path, op_string, value)


def snapshot_to_dict(doc) -> Dict[str, Any]:
    """
    Convert a document snapshot to a plain dict.

    Firestore returns DatetimeWithNanoseconds for timestamp fields; those
    are datetime subclasses and are normalised to naive UTC datetimes.
    """
    data = doc.to_dict() or {}
    for key, value in list(data.items()):
        if isinstance(value, datetime) and value.tzinfo is not None:
            data[key] = value.astimezone(timezone.utc).replace(tzinfo=None)
    return data
