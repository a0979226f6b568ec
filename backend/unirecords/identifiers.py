"""Turn a lookup token into the filters used to find a document.

A token is either a surrogate key (the 24 character hex form of an
``ObjectId``) or a natural key such as a course code. Resolution is a pure
function so it can be tested without a database; the repository probes the
returned filters in order.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from bson import ObjectId
from bson.errors import InvalidId

from .errors import InvalidIdentifierError


def parse_object_id(token: Any) -> ObjectId | None:
    """Return ``token`` as an ``ObjectId`` or ``None`` when it is not one."""

    if isinstance(token, ObjectId):
        return token
    if not isinstance(token, str) or len(token) != 24:
        return None
    try:
        return ObjectId(token)
    except (InvalidId, TypeError):
        return None


def candidate_filters(
    token: Any, natural_keys: Sequence[str] = (), *, resource: str = "record"
) -> List[Dict[str, Any]]:
    """Build the ordered lookup filters for ``token``.

    The surrogate-key filter comes first when the token is well formed,
    followed by one filter per natural key field.
    """

    cleaned = str(token).strip() if token is not None else ""
    if not cleaned:
        raise InvalidIdentifierError(f"A {resource} identifier is required.")

    filters: List[Dict[str, Any]] = []
    object_id = parse_object_id(cleaned)
    if object_id is not None:
        filters.append({"_id": object_id})

    for field in natural_keys:
        filters.append({field: cleaned})

    if not filters:
        raise InvalidIdentifierError(f"Invalid {resource} ID format.")
    return filters


def require_object_id(token: Any, *, resource: str = "record") -> ObjectId:
    object_id = parse_object_id(str(token).strip() if token is not None else "")
    if object_id is None:
        raise InvalidIdentifierError(f"Invalid {resource} ID format.")
    return object_id


__all__ = ["parse_object_id", "candidate_filters", "require_object_id"]
