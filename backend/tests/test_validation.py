"""Payload validation and coercion for each resource kind."""

from __future__ import annotations

import sys
import unittest
from datetime import datetime
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from bson import ObjectId

from unirecords.entities import ANNOUNCEMENTS, COURSES, DEPARTMENTS, EXAMINATIONS, STUDENTS
from unirecords.errors import ValidationError
from unirecords.validation import (
    normalize_fields,
    parse_bool,
    parse_date,
    parse_int,
    require_valid,
    validate_payload,
)


class ParsersTestCase(unittest.TestCase):
    def test_parse_date_formats(self) -> None:
        self.assertEqual(datetime(2024, 1, 15), parse_date("2024-01-15"))
        self.assertEqual(datetime(2024, 1, 15, 9, 30), parse_date("2024-01-15T09:30:00Z"))
        self.assertEqual(
            datetime(2024, 1, 15, 7, 30), parse_date("2024-01-15T09:30:00+02:00")
        )
        self.assertEqual(datetime(1970, 1, 1, 0, 0, 1), parse_date(1000))

    def test_parse_date_rejects_garbage(self) -> None:
        for value in ("not a date", "", True, [2024]):
            with self.subTest(value=value):
                with self.assertRaises((ValueError, TypeError)):
                    parse_date(value)

    def test_parse_int(self) -> None:
        self.assertEqual(90, parse_int("90"))
        self.assertEqual(90, parse_int(" 90.7 "))
        self.assertEqual(3, parse_int(3.2))
        with self.assertRaises(ValueError):
            parse_int(True)
        with self.assertRaises(ValueError):
            parse_int("ninety")

    def test_parse_bool(self) -> None:
        self.assertTrue(parse_bool("true"))
        self.assertFalse(parse_bool("0"))
        self.assertTrue(parse_bool(True))
        with self.assertRaises(ValueError):
            parse_bool("maybe")


class ValidatePayloadTestCase(unittest.TestCase):
    def test_missing_required_fields_are_reported(self) -> None:
        cleaned, errors = validate_payload(DEPARTMENTS, {"name": "Physics"}, require_all=True)

        self.assertEqual({"code": "code is required."}, errors)
        self.assertEqual({"name": "Physics"}, cleaned)

    def test_non_object_body(self) -> None:
        _, errors = validate_payload(STUDENTS, ["not", "an", "object"], require_all=True)
        self.assertIn("_global", errors)

    def test_student_payload_is_cleaned(self) -> None:
        cleaned = require_valid(
            STUDENTS,
            {
                "_id": "ignored",
                "name": "  John Doe ",
                "studentId": "ST1",
                "email": "John.Doe@Example.com",
                "department": "CS",
                "enrollmentDate": "2023-09-01",
                "hobby": "chess",
            },
            require_all=True,
        )

        self.assertNotIn("_id", cleaned)
        self.assertEqual("John Doe", cleaned["name"])
        self.assertEqual("john.doe@example.com", cleaned["email"])
        self.assertEqual(datetime(2023, 9, 1), cleaned["enrollmentDate"])
        self.assertEqual("chess", cleaned["hobby"])

    def test_invalid_email(self) -> None:
        _, errors = validate_payload(STUDENTS, {"email": "nope"}, require_all=False)
        self.assertEqual({"email": "Enter a valid email address."}, errors)

    def test_course_status_is_a_closed_set(self) -> None:
        cleaned, errors = validate_payload(COURSES, {"status": "Archived"}, require_all=False)
        self.assertEqual({"status": "archived"}, cleaned)
        self.assertEqual({}, errors)

        _, errors = validate_payload(COURSES, {"status": "paused"}, require_all=False)
        self.assertIn("status", errors)

    def test_course_enrolled_students_are_deduplicated(self) -> None:
        cleaned = require_valid(
            COURSES, {"enrolledStudents": ["S1", "S2", "S1", " "]}, require_all=False
        )
        self.assertEqual(["S1", "S2"], cleaned["enrolledStudents"])

    def test_course_enrolled_students_cannot_exceed_capacity(self) -> None:
        _, errors = validate_payload(
            COURSES,
            {"maxCapacity": 1, "enrolledStudents": ["S1", "S2"]},
            require_all=False,
        )
        self.assertIn("enrolledStudents", errors)

    def test_examination_numbers_and_flags_are_coerced(self) -> None:
        cleaned = require_valid(
            EXAMINATIONS,
            {
                "title": "Final",
                "type": "final",
                "startDate": "2024-05-01T09:00:00Z",
                "endDate": "2024-05-01T12:00:00Z",
                "duration": "180",
                "maxMarks": "100",
                "passingMarks": "40",
                "proctored": "true",
            },
            require_all=True,
        )
        self.assertEqual(180, cleaned["duration"])
        self.assertEqual(100, cleaned["maxMarks"])
        self.assertEqual(40, cleaned["passingMarks"])
        self.assertIs(True, cleaned["proctored"])

    def test_announcement_type_and_nullable_expiry(self) -> None:
        cleaned = require_valid(
            ANNOUNCEMENTS,
            {
                "title": "Notice",
                "content": "Body",
                "type": "general",
                "audience": "all",
                "expiryDate": None,
            },
            require_all=True,
        )
        self.assertIsNone(cleaned["expiryDate"])

        with self.assertRaises(ValidationError) as ctx:
            require_valid(ANNOUNCEMENTS, {"type": "gossip"}, require_all=False)
        self.assertIn("type", ctx.exception.details)

    def test_department_faculty_must_be_object_ids(self) -> None:
        oid = ObjectId()
        cleaned = require_valid(DEPARTMENTS, {"faculty": [str(oid), str(oid)]}, require_all=False)
        self.assertEqual([oid], cleaned["faculty"])

        _, errors = validate_payload(DEPARTMENTS, {"faculty": ["FAC001"]}, require_all=False)
        self.assertIn("faculty", errors)

    def test_integers_must_fit_in_64_bits(self) -> None:
        _, errors = validate_payload(EXAMINATIONS, {"maxMarks": 10**30}, require_all=False)
        self.assertEqual({"maxMarks": "maxMarks is out of range."}, errors)

        cleaned, errors = validate_payload(
            EXAMINATIONS, {"maxMarks": 2**63 - 1}, require_all=False
        )
        self.assertEqual({}, errors)
        self.assertEqual(2**63 - 1, cleaned["maxMarks"])

    def test_field_names_cannot_be_paths_or_operators(self) -> None:
        cleaned, errors = validate_payload(
            COURSES,
            {"enrolledStudents.0": "S1", "$unset": {"name": ""}, "name": "Kept"},
            require_all=False,
        )
        self.assertEqual({"name": "Kept"}, cleaned)
        self.assertEqual({"enrolledStudents.0", "$unset"}, set(errors))

    def test_require_valid_message_lists_missing_fields(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            require_valid(ANNOUNCEMENTS, {"title": "Only a title"}, require_all=True)
        self.assertEqual(
            "Missing required fields: content, type, audience.", ctx.exception.message
        )


class NormalizeFieldsTestCase(unittest.TestCase):
    def test_is_idempotent(self) -> None:
        once = normalize_fields(EXAMINATIONS, {"startDate": "2024-01-01", "duration": "60"})
        twice = normalize_fields(EXAMINATIONS, once)
        self.assertEqual({"startDate": datetime(2024, 1, 1), "duration": 60}, twice)

    def test_reports_bad_values(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            normalize_fields(EXAMINATIONS, {"maxMarks": "lots"})
        self.assertEqual({"maxMarks": "maxMarks must be an integer."}, ctx.exception.details)


if __name__ == "__main__":
    unittest.main()
