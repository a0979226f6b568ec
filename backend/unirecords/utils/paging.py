"""Query-string helpers for paginated list endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Tuple

from pymongo import ASCENDING, DESCENDING

SortSpec = Tuple[str, int]


class PagingParamError(ValueError):
    """Raised when ``page``, ``limit`` or ``sort`` cannot be used."""


@dataclass
class PagingParams:
    page: int
    limit: int
    sort: SortSpec


def page_count(total: int, limit: int) -> int:
    """Number of pages needed for ``total`` items, ``ceil(total / limit)``."""

    return (total + limit - 1) // limit if total else 0


def _bounded_int(
    args: Mapping[str, str], name: str, default: int, low: int, high: int | None = None
) -> int:
    raw = (args.get(name) or "").strip()
    if not raw:
        return default
    digits = raw[1:] if raw.startswith("-") else raw
    if not (digits.isascii() and digits.isdigit()):
        raise PagingParamError(f"{name} must be an integer.")
    value = int(raw)
    if value < low or (high is not None and value > high):
        bounds = f"between {low} and {high}" if high is not None else f"at least {low}"
        raise PagingParamError(f"{name} must be {bounds}.")
    return value


def parse_sort(
    raw_sort: str | None,
    *,
    allowed_fields: Mapping[str, str],
    default_sort: str,
) -> SortSpec:
    """Turn ``name`` / ``-name`` into a ``(field, direction)`` pair.

    Only keys of ``allowed_fields`` are accepted; they map to stored field
    names.
    """

    key = (raw_sort or "").strip() or default_sort
    descending = key.startswith("-")
    key = key.lstrip("-")

    field = allowed_fields.get(key)
    if field is None:
        choices = ", ".join(sorted(allowed_fields))
        raise PagingParamError(f"sort must be one of: {choices} (prefix with '-' to reverse).")
    return field, DESCENDING if descending else ASCENDING


def parse_paging_params(
    args: Mapping[str, str],
    *,
    default_limit: int = 10,
    max_limit: int = 100,
    allowed_sort_fields: Mapping[str, str],
    default_sort: str,
) -> PagingParams:
    return PagingParams(
        page=_bounded_int(args, "page", 1, 1),
        limit=_bounded_int(args, "limit", default_limit, 1, max_limit),
        sort=parse_sort(
            args.get("sort"),
            allowed_fields=allowed_sort_fields,
            default_sort=default_sort,
        ),
    )
