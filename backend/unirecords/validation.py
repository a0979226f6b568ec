"""Payload validation and field coercion.

``validate_payload`` is pure: it never touches the database and returns the
cleaned document together with a per-field error map, the same shape the
routes turn into a 400 response.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from .entities import (
    DATE_FIELDS,
    INT_FIELDS,
    INT_MINIMUMS,
    NULLABLE_DATE_FIELDS,
    SERVER_MANAGED_FIELDS,
    ResourceSpec,
)
from .errors import ValidationError
from .identifiers import parse_object_id

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the form pymongo hands back."""

    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def _clean_string(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def parse_date(value: Any) -> datetime:
    """Coerce ISO strings, epoch milliseconds, dates and datetimes to naive UTC."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, bool):
        raise ValueError("booleans are not dates")
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("empty date")
        if text[-1] in "Zz":
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"unsupported date value {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_int(value: Any) -> int:
    """Integer coercion that tolerates numeric strings such as ``"90"``."""

    if isinstance(value, bool):
        raise ValueError("booleans are not integers")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("non-finite number")
        return int(value)
    text = _clean_string(value)
    if not text:
        raise ValueError("empty number")
    number = float(text)
    if not math.isfinite(number):
        raise ValueError("non-finite number")
    return int(number)


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    text = _clean_string(value).lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_string_list(value: Any) -> List[str]:
    if value in (None, ""):
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [_clean_string(item) for item in value if _clean_string(item)]
    raise ValueError("must be a list")


def _unique(values: Iterable[Any]) -> List[Any]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _check_field_name(field: Any) -> str | None:
    if not isinstance(field, str) or not field:
        return "Field names must be non-empty strings."
    if field.startswith("$") or "." in field:
        return "Field names cannot start with '$' or contain '.'."
    return None


def _coerce_field(spec: ResourceSpec, field: str, value: Any) -> Any:
    """Coerce one field according to ``spec``; raises ``ValueError`` on bad input."""

    if field in DATE_FIELDS:
        if value in (None, ""):
            if field in NULLABLE_DATE_FIELDS:
                return None
            raise ValueError(f"{field} must be a valid date.")
        try:
            return parse_date(value)
        except (TypeError, ValueError, OverflowError, OSError):
            raise ValueError(f"{field} must be a valid date.") from None

    if field in INT_FIELDS:
        try:
            number = parse_int(value)
        except (TypeError, ValueError, OverflowError):
            raise ValueError(f"{field} must be an integer.") from None
        minimum = INT_MINIMUMS.get(field)
        if minimum is not None and number < minimum:
            raise ValueError(f"{field} must be at least {minimum}.")
        if not INT64_MIN <= number <= INT64_MAX:
            raise ValueError(f"{field} is out of range.")
        return number

    if field in spec.bool_fields:
        try:
            return parse_bool(value)
        except ValueError:
            raise ValueError(f"{field} must be true or false.") from None

    if field in spec.choices:
        choice = _clean_string(value).lower()
        allowed = spec.choices[field]
        if choice not in allowed:
            raise ValueError(f"{field} must be one of: {', '.join(allowed)}.")
        return choice

    if field in spec.set_fields:
        try:
            return _unique(_parse_string_list(value))
        except ValueError:
            raise ValueError(f"{field} must be an array of strings.") from None

    if field in spec.list_fields:
        if value in (None, ""):
            return []
        if isinstance(value, (list, tuple)):
            return list(value)
        if isinstance(value, str):
            return _parse_string_list(value)
        raise ValueError(f"{field} must be an array.")

    if field in spec.object_id_fields:
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"{field} must be an array of IDs.")
        object_ids = [parse_object_id(_clean_string(item)) for item in value]
        if any(item is None for item in object_ids):
            raise ValueError(f"{field} must only contain valid IDs.")
        return _unique(object_ids)

    if field in spec.required or field in spec.string_fields:
        cleaned = _clean_string(value)
        if field in spec.lowercase_fields:
            cleaned = cleaned.lower()
        if field == "email" and cleaned:
            if "@" not in cleaned or "." not in cleaned.split("@")[-1]:
                raise ValueError("Enter a valid email address.")
        return cleaned

    return value


def validate_payload(
    spec: ResourceSpec, payload: Mapping[str, Any] | None, *, require_all: bool
) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """Validate a create (``require_all``) or patch payload for ``spec``.

    Unknown fields are kept as supplied; server-managed fields are dropped.
    """

    if payload is None or not isinstance(payload, Mapping):
        return {}, {"_global": "Request body must be a JSON object."}

    errors: Dict[str, str] = {}
    cleaned: Dict[str, Any] = {}

    if require_all:
        for field in spec.required:
            value = payload.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field] = f"{field} is required."

    for field, value in payload.items():
        if field in SERVER_MANAGED_FIELDS or field in errors:
            continue
        name_error = _check_field_name(field)
        if name_error:
            errors[str(field)] = name_error
            continue
        try:
            coerced = _coerce_field(spec, field, value)
        except ValueError as exc:
            errors[field] = str(exc)
            continue

        if field in spec.required and coerced in ("", None):
            errors[field] = f"{field} is required."
            continue
        cleaned[field] = coerced

    capacity = cleaned.get("maxCapacity")
    enrolled = cleaned.get("enrolledStudents")
    if capacity is not None and enrolled is not None and len(enrolled) > capacity:
        errors["enrolledStudents"] = "Enrolled students exceed maxCapacity."

    return cleaned, errors


def require_valid(
    spec: ResourceSpec, payload: Mapping[str, Any] | None, *, require_all: bool
) -> Dict[str, Any]:
    """Like ``validate_payload`` but raises ``ValidationError`` on failure."""

    cleaned, errors = validate_payload(spec, payload, require_all=require_all)
    if errors:
        details = {k: v for k, v in errors.items() if k != "_global"}
        message = errors.get("_global")
        if message is None:
            missing = [field for field in spec.required if field in errors and "required" in errors[field]]
            message = (
                f"Missing required fields: {', '.join(missing)}."
                if missing
                else "Validation failed."
            )
        raise ValidationError(message, details=details)
    return cleaned


def normalize_fields(spec: ResourceSpec, document: Mapping[str, Any]) -> Dict[str, Any]:
    """Coerce date and integer fields in an already-validated document.

    Idempotent: datetimes and ints pass through unchanged.
    """

    normalized: Dict[str, Any] = {}
    errors: Dict[str, str] = {}
    for field, value in document.items():
        name_error = _check_field_name(field)
        if name_error:
            errors[str(field)] = name_error
            continue
        if field in DATE_FIELDS or field in INT_FIELDS:
            try:
                value = _coerce_field(spec, field, value)
            except ValueError as exc:
                errors[field] = str(exc)
                continue
        normalized[field] = value
    if errors:
        raise ValidationError(details=errors)
    return normalized


def clean_key(value: Any, *, name: str) -> str:
    cleaned = _clean_string(value)
    if not cleaned:
        raise ValidationError(f"{name} is required.", details={name: f"{name} is required."})
    return cleaned


__all__ = [
    "utcnow",
    "parse_date",
    "parse_int",
    "parse_bool",
    "validate_payload",
    "require_valid",
    "normalize_fields",
    "clean_key",
]
