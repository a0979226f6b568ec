"""CRUD blueprints built from a resource definition."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from flask import Blueprint, current_app, jsonify, request

from ..entities import ANNOUNCEMENTS, FACULTY, PAGED_ENVELOPE, STUDENTS, ResourceSpec
from ..errors import RecordsError
from ..repository import ListResult, ResourceRepository, build_list_filter
from ..serializers import serialize_document
from ..store import RecordStore
from ..utils.paging import PagingParamError, parse_paging_params
from ..validation import require_valid

logger = logging.getLogger(__name__)

STORE_EXTENSION = "unirecords"


def get_store() -> RecordStore:
    return current_app.extensions[STORE_EXTENSION]


def get_repository(spec: ResourceSpec) -> ResourceRepository:
    return get_store().repository(spec.kind)


def json_error(message: str, status: int, details: Dict[str, Any] | None = None):
    payload: Dict[str, Any] = {"success": False, "message": message}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def handle_records_error(action: str, exc: RecordsError):
    if exc.status_code >= 500:
        logger.error("%s: %s", action, exc.message)
    else:
        logger.info("%s: %s", action, exc.message)
    return json_error(exc.message, exc.status_code, exc.details or None)


def list_response(spec: ResourceSpec, result: ListResult):
    data = [serialize_document(document) for document in result.items]
    if spec.envelope == PAGED_ENVELOPE:
        return jsonify({"data": data, "pagination": result.pagination()})
    return jsonify(
        {
            "success": True,
            "count": len(data),
            "data": data,
            "pagination": result.pagination(),
        }
    )


def list_records(spec: ResourceSpec, extra_filters: Mapping[str, Any] | None = None):
    try:
        paging = parse_paging_params(
            request.args,
            allowed_sort_fields=spec.sort_fields,
            default_sort=spec.default_sort,
        )
    except PagingParamError as exc:
        return json_error(str(exc), 400)

    filters = build_list_filter(spec, request.args)
    if extra_filters:
        filters.update(extra_filters)

    try:
        result = get_repository(spec).list(
            filters, page=paging.page, limit=paging.limit, sort=paging.sort
        )
    except RecordsError as exc:
        return handle_records_error(f"Failed to fetch {spec.kind}", exc)
    return list_response(spec, result)


def make_resource_blueprint(spec: ResourceSpec) -> Blueprint:
    """Register list/get/create/update/delete routes under ``/api/<kind>``."""

    bp = Blueprint(spec.kind, __name__, url_prefix=f"/api/{spec.kind}")

    @bp.get("")
    def list_view():
        return list_records(spec)

    @bp.get("/<token>")
    def get_view(token: str):
        try:
            document = get_repository(spec).get(token)
        except RecordsError as exc:
            return handle_records_error(f"Failed to fetch {spec.resource}", exc)
        return jsonify({"success": True, "data": serialize_document(document)})

    @bp.post("")
    def create_view():
        try:
            cleaned = require_valid(spec, request.get_json(silent=True), require_all=True)
            document, created = get_repository(spec).create(cleaned)
        except RecordsError as exc:
            return handle_records_error(f"Failed to create {spec.resource}", exc)

        if created:
            message, status = f"{spec.label} created successfully", 201
        else:
            message, status = f"{spec.label} updated successfully", 200
        return (
            jsonify(
                {
                    "success": True,
                    "message": message,
                    "data": serialize_document(document),
                }
            ),
            status,
        )

    @bp.route("/<token>", methods=["PUT", "PATCH"])
    def update_view(token: str):
        try:
            cleaned = require_valid(spec, request.get_json(silent=True), require_all=False)
            document = get_repository(spec).update(token, cleaned)
        except RecordsError as exc:
            return handle_records_error(f"Failed to update {spec.resource}", exc)
        return jsonify(
            {
                "success": True,
                "message": f"{spec.label} updated successfully",
                "data": serialize_document(document),
            }
        )

    @bp.delete("/<token>")
    def delete_view(token: str):
        try:
            get_repository(spec).delete(token)
        except RecordsError as exc:
            return handle_records_error(f"Failed to delete {spec.resource}", exc)
        return jsonify(
            {"success": True, "message": f"{spec.label} deleted successfully"}
        )

    return bp


students_bp = make_resource_blueprint(STUDENTS)
faculty_bp = make_resource_blueprint(FACULTY)
announcements_bp = make_resource_blueprint(ANNOUNCEMENTS)


__all__ = [
    "STORE_EXTENSION",
    "get_store",
    "get_repository",
    "json_error",
    "handle_records_error",
    "list_records",
    "make_resource_blueprint",
    "students_bp",
    "faculty_bp",
    "announcements_bp",
]
