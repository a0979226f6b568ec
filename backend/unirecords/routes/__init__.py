"""Application route blueprints and helpers."""

from .courses import courses_bp
from .departments import departments_bp
from .examinations import examinations_bp
from .resources import (
    STORE_EXTENSION,
    announcements_bp,
    faculty_bp,
    json_error,
    students_bp,
)

BLUEPRINTS = (
    students_bp,
    courses_bp,
    departments_bp,
    faculty_bp,
    examinations_bp,
    announcements_bp,
)

__all__ = ["BLUEPRINTS", "STORE_EXTENSION", "json_error"]
