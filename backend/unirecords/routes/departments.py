"""Department routes, including the faculty membership link."""

from __future__ import annotations

from flask import jsonify

from ..entities import DEPARTMENTS
from ..errors import RecordsError
from ..identifiers import require_object_id
from ..serializers import serialize_document
from .resources import get_repository, handle_records_error, make_resource_blueprint

departments_bp = make_resource_blueprint(DEPARTMENTS)


@departments_bp.post("/<token>/faculty/<faculty_id>")
def add_faculty(token: str, faculty_id: str):
    try:
        faculty_oid = require_object_id(faculty_id, resource="faculty")
        repository = get_repository(DEPARTMENTS)
        department = repository.resolve(token)
        updated = repository.add_to_set(department["_id"], "faculty", faculty_oid)
    except RecordsError as exc:
        return handle_records_error("Failed to add faculty to department", exc)
    return jsonify(
        {
            "success": True,
            "message": "Faculty added to department successfully",
            "data": serialize_document(updated),
        }
    )


@departments_bp.delete("/<token>/faculty/<faculty_id>")
def remove_faculty(token: str, faculty_id: str):
    try:
        faculty_oid = require_object_id(faculty_id, resource="faculty")
        repository = get_repository(DEPARTMENTS)
        department = repository.resolve(token)
        updated = repository.pull(department["_id"], "faculty", faculty_oid)
    except RecordsError as exc:
        return handle_records_error("Failed to remove faculty from department", exc)
    return jsonify(
        {
            "success": True,
            "message": "Faculty removed from department successfully",
            "data": serialize_document(updated),
        }
    )


__all__ = ["departments_bp"]
