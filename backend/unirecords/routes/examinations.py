"""Examination routes."""

from __future__ import annotations

from ..entities import EXAMINATIONS
from .resources import json_error, list_records, make_resource_blueprint

examinations_bp = make_resource_blueprint(EXAMINATIONS)


@examinations_bp.get("/course/<course_id>")
def list_course_examinations(course_id: str):
    course = course_id.strip()
    if not course:
        return json_error("Course code is required.", 400)
    return list_records(EXAMINATIONS, {"courses": course})


__all__ = ["examinations_bp"]
