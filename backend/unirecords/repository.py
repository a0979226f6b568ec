"""Generic MongoDB repository shared by every entity kind.

Lookups accept either a surrogate id or the kind's natural key, writes go
through the uniqueness guard, and every driver error is translated into the
service's own error taxonomy before it leaves this module.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Mapping, Tuple

from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from .entities import DEFAULT_MAX_CAPACITY, SERVER_MANAGED_FIELDS, ResourceSpec
from .errors import (
    DuplicateRecordError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from .identifiers import candidate_filters
from .utils.paging import page_count, parse_sort
from .validation import normalize_fields, parse_bool, utcnow

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


@dataclass
class ListResult:
    items: List[Document]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return page_count(self.total, self.limit)

    def pagination(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "pages": self.pages,
        }


def _clean_string(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def build_list_filter(
    spec: ResourceSpec, args: Mapping[str, Any], *, now: datetime | None = None
) -> Dict[str, Any]:
    """Map list query parameters onto a MongoDB filter; unknown keys are ignored."""

    filters: Dict[str, Any] = {}

    for param, field in spec.filter_params.items():
        value = _clean_string(args.get(param))
        if value:
            filters[field] = value

    for param in spec.bool_filter_params:
        raw = _clean_string(args.get(param))
        if raw:
            filters[param] = raw.lower() == "true"

    search = _clean_string(args.get("search"))
    if search and spec.search_fields:
        pattern = re.escape(search)
        filters["$or"] = [
            {field: {"$regex": pattern, "$options": "i"}} for field in spec.search_fields
        ]

    if spec.window_fields and _clean_string(args.get("active")):
        try:
            active_only = parse_bool(_clean_string(args.get("active")))
        except ValueError:
            active_only = False
        if active_only:
            start_field, end_field = spec.window_fields
            moment = now or utcnow()
            filters[start_field] = {"$lte": moment}
            filters["$and"] = [
                {"$or": [{end_field: None}, {end_field: {"$gt": moment}}]}
            ]

    return filters


def check_unique(
    collection: Collection,
    spec: ResourceSpec,
    fields: Mapping[str, Any],
    *,
    exclude_id: Any = None,
) -> None:
    """Raise ``DuplicateRecordError`` if any unique field in ``fields`` is taken."""

    for field in spec.unique_fields:
        if field not in fields or fields[field] in (None, ""):
            continue
        query: Dict[str, Any] = {field: fields[field]}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        if collection.find_one(query, projection={"_id": 1}) is not None:
            raise DuplicateRecordError(spec.label, field, fields[field])


class ResourceRepository:
    """CRUD operations for one entity kind over an injected collection."""

    def __init__(
        self,
        collection: Collection,
        spec: ResourceSpec,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.collection = collection
        self.spec = spec
        self._clock = clock

    @contextmanager
    def _storage(self, action: str) -> Iterator[None]:
        try:
            yield
        except DuplicateKeyError as exc:
            field, value = self._duplicate_key_of(exc)
            logger.warning("Unique index rejected %s: %s=%r", action, field, value)
            raise DuplicateRecordError(self.spec.label, field, value) from exc
        except PyMongoError as exc:
            logger.exception("Failed to %s due to MongoDB error", action)
            raise StorageUnavailableError() from exc

    def _duplicate_key_of(self, exc: DuplicateKeyError) -> Tuple[str, Any]:
        key_value = (exc.details or {}).get("keyValue") or {}
        if key_value:
            return next(iter(key_value.items()))
        field = self.spec.unique_fields[0] if self.spec.unique_fields else "_id"
        return field, "?"

    def _not_found(self) -> NotFoundError:
        return NotFoundError(f"{self.spec.label} not found.")

    def find(self, token: Any) -> Document | None:
        """Probe the surrogate id, then each natural key; first match wins."""

        filters = candidate_filters(token, self.spec.natural_keys, resource=self.spec.resource)
        with self._storage(f"look up {self.spec.resource}"):
            for candidate in filters:
                document = self.collection.find_one(candidate)
                if document is not None:
                    return document
        return None

    def resolve(self, token: Any) -> Document:
        document = self.find(token)
        if document is None:
            raise self._not_found()
        return document

    def get(self, token: Any) -> Document:
        return self.resolve(token)

    def _reload(self, document_id: Any) -> Document:
        document = self.collection.find_one({"_id": document_id})
        if document is None:
            raise self._not_found()
        return document

    def _with_defaults(self, document: Document, now: datetime) -> Document:
        merged: Document = {}
        for field, value in self.spec.defaults.items():
            merged[field] = deepcopy(value)
        for field in self.spec.timestamp_defaults:
            merged[field] = now
        merged.update(document)
        return merged

    def create(self, payload: Mapping[str, Any]) -> Tuple[Document, bool]:
        """Insert a document; returns ``(document, created)``.

        For kinds that upsert on their natural key (students) an existing
        match is updated in place and ``created`` is ``False``.
        """

        document = normalize_fields(
            self.spec,
            {k: v for k, v in payload.items() if k not in SERVER_MANAGED_FIELDS},
        )

        with self._storage(f"create {self.spec.resource}"):
            if self.spec.upsert_on_natural_key and self.spec.natural_keys:
                key = self.spec.natural_keys[0]
                existing = None
                if document.get(key):
                    existing = self.collection.find_one({key: document[key]})
                if existing is not None:
                    return self._overwrite(existing, document), False

            check_unique(self.collection, self.spec, document)

            now = self._clock()
            to_insert = self._with_defaults(document, now)
            to_insert["createdAt"] = now
            to_insert["updatedAt"] = now
            result = self.collection.insert_one(to_insert)
            to_insert["_id"] = result.inserted_id

        logger.info("Created %s %s", self.spec.resource, to_insert["_id"])
        return to_insert, True

    def _overwrite(self, existing: Document, document: Document) -> Document:
        key = self.spec.natural_keys[0]
        others = {field: value for field, value in document.items() if field != key}
        check_unique(self.collection, self.spec, others, exclude_id=existing["_id"])

        changes = dict(document)
        changes["updatedAt"] = self._clock()
        self.collection.update_one({"_id": existing["_id"]}, {"$set": changes})
        logger.info(
            "%s %s already existed; updated in place",
            self.spec.label,
            document.get(key),
        )
        return self._reload(existing["_id"])

    def list(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        page: int = 1,
        limit: int = 10,
        sort: Tuple[str, int] | None = None,
    ) -> ListResult:
        query = dict(filters or {})
        if sort is None:
            sort = parse_sort(
                None,
                allowed_fields=self.spec.sort_fields,
                default_sort=self.spec.default_sort,
            )

        with self._storage(f"list {self.spec.kind}"):
            total = self.collection.count_documents(query)
            cursor = (
                self.collection.find(query)
                .sort([sort, ("_id", ASCENDING)])
                .skip((page - 1) * limit)
                .limit(limit)
            )
            items = [document for document in cursor]

        return ListResult(items=items, total=total, page=page, limit=limit)

    def update(self, token: Any, patch: Mapping[str, Any]) -> Document:
        """Apply a partial update and return the document as stored afterwards."""

        changes = normalize_fields(
            self.spec,
            {k: v for k, v in patch.items() if k not in SERVER_MANAGED_FIELDS},
        )

        existing = self.resolve(token)
        self._check_capacity(existing, changes)
        with self._storage(f"update {self.spec.resource}"):
            changed_unique = {
                field: changes[field]
                for field in self.spec.unique_fields
                if field in changes and changes[field] != existing.get(field)
            }
            check_unique(
                self.collection, self.spec, changed_unique, exclude_id=existing["_id"]
            )

            changes["updatedAt"] = self._clock()
            result = self.collection.update_one({"_id": existing["_id"]}, {"$set": changes})
            if result.matched_count == 0:
                raise self._not_found()
            updated = self._reload(existing["_id"])

        logger.info("Updated %s %s", self.spec.resource, existing["_id"])
        return updated

    def _check_capacity(self, existing: Document, changes: Mapping[str, Any]) -> None:
        """Reject a patch that leaves more enrolled students than seats."""

        if "enrolledStudents" not in self.spec.set_fields:
            return
        if "enrolledStudents" not in changes and "maxCapacity" not in changes:
            return
        merged = {**existing, **changes}
        capacity = merged.get("maxCapacity")
        if capacity is None:
            capacity = DEFAULT_MAX_CAPACITY
        if len(merged.get("enrolledStudents") or []) > capacity:
            raise ValidationError(
                "Enrolled students exceed maxCapacity.",
                details={"enrolledStudents": "Enrolled students exceed maxCapacity."},
            )

    def delete(self, token: Any) -> Document:
        existing = self.resolve(token)
        with self._storage(f"delete {self.spec.resource}"):
            result = self.collection.delete_one({"_id": existing["_id"]})
        if result.deleted_count == 0:
            raise self._not_found()
        logger.info("Deleted %s %s", self.spec.resource, existing["_id"])
        return existing

    def add_to_set(self, document_id: Any, field: str, value: Any) -> Document:
        """Atomically add ``value`` to the array ``field`` if it is absent."""

        return self._mutate_set(document_id, {"$addToSet": {field: value}}, f"add to {field}")

    def pull(self, document_id: Any, field: str, value: Any) -> Document:
        """Atomically remove ``value`` from the array ``field``."""

        return self._mutate_set(document_id, {"$pull": {field: value}}, f"remove from {field}")

    def _mutate_set(self, document_id: Any, operation: Document, action: str) -> Document:
        update = dict(operation)
        update["$set"] = {"updatedAt": self._clock()}
        with self._storage(f"{action} on {self.spec.resource}"):
            result = self.collection.update_one({"_id": document_id}, update)
            if result.matched_count == 0:
                raise self._not_found()
            return self._reload(document_id)


__all__ = ["ListResult", "ResourceRepository", "build_list_filter", "check_unique"]
