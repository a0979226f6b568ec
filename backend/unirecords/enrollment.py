"""Course enrollment: a capacity-bounded set of student keys per course.

Membership and capacity are checked against the course as read, then the
change is applied with ``$addToSet`` / ``$pull``. The read and the write are
separate round trips: concurrent enrolls can overshoot ``maxCapacity`` but
can never record a student twice.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from .entities import DEFAULT_MAX_CAPACITY
from .errors import AlreadyEnrolledError, CapacityExceededError, NotEnrolledError
from .repository import ResourceRepository
from .validation import clean_key

logger = logging.getLogger(__name__)

ENROLLED_FIELD = "enrolledStudents"


def enrolled_students(course: Dict[str, Any]) -> list:
    return list(course.get(ENROLLED_FIELD) or [])


def course_capacity(course: Dict[str, Any]) -> int:
    capacity = course.get("maxCapacity")
    if capacity is None:
        return DEFAULT_MAX_CAPACITY
    return int(capacity)


class EnrollmentLedger:
    def __init__(self, courses: ResourceRepository) -> None:
        self.courses = courses

    def enroll(self, course_token: Any, student_key: Any) -> Dict[str, Any]:
        """Add a student to a course and return the updated course."""

        student = clean_key(student_key, name="studentId")
        course = self.courses.resolve(course_token)
        enrolled = enrolled_students(course)

        if student in enrolled:
            raise AlreadyEnrolledError()
        if len(enrolled) >= course_capacity(course):
            raise CapacityExceededError()

        updated = self.courses.add_to_set(course["_id"], ENROLLED_FIELD, student)
        logger.info("Enrolled %s in course %s", student, course.get("courseCode", course["_id"]))
        return updated

    def unenroll(self, course_token: Any, student_key: Any) -> Dict[str, Any]:
        """Remove a student from a course and return the updated course."""

        student = clean_key(student_key, name="studentId")
        course = self.courses.resolve(course_token)

        if student not in enrolled_students(course):
            raise NotEnrolledError()

        updated = self.courses.pull(course["_id"], ENROLLED_FIELD, student)
        logger.info("Removed %s from course %s", student, course.get("courseCode", course["_id"]))
        return updated


__all__ = ["EnrollmentLedger", "ENROLLED_FIELD"]
