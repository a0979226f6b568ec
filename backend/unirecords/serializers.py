"""Convert MongoDB documents into JSON-serialisable dicts."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Mapping

from bson import ObjectId


def serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.isoformat(timespec="milliseconds") + "Z"
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): serialize_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [serialize_value(item) for item in value]
    return value


def serialize_document(document: Mapping[str, Any] | None) -> Dict[str, Any] | None:
    """Serialize a raw document; ``_id`` and dates become strings."""

    if document is None:
        return None
    return serialize_value(document)


__all__ = ["serialize_value", "serialize_document"]
