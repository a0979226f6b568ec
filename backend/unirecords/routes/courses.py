"""Course routes, including enrollment."""

from __future__ import annotations

from flask import jsonify

from ..entities import COURSES
from ..errors import RecordsError
from ..serializers import serialize_document
from .resources import get_store, handle_records_error, make_resource_blueprint

courses_bp = make_resource_blueprint(COURSES)


@courses_bp.post("/<token>/enroll/<student_id>")
def enroll_student(token: str, student_id: str):
    try:
        course = get_store().enrollment.enroll(token, student_id)
    except RecordsError as exc:
        return handle_records_error("Failed to enroll student", exc)
    return jsonify(
        {
            "success": True,
            "message": "Student enrolled successfully",
            "data": serialize_document(course),
        }
    )


@courses_bp.delete("/<token>/enroll/<student_id>")
def remove_student(token: str, student_id: str):
    try:
        course = get_store().enrollment.unenroll(token, student_id)
    except RecordsError as exc:
        return handle_records_error("Failed to remove student from course", exc)
    return jsonify(
        {
            "success": True,
            "message": "Student removed from course successfully",
            "data": serialize_document(course),
        }
    )


__all__ = ["courses_bp"]
