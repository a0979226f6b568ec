"""Resource definitions for every entity kind the API serves."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from pymongo import ASCENDING, DESCENDING, IndexModel

from .errors import InvalidIdentifierError

# Fields normalized to datetimes / integers wherever they appear in a payload.
DATE_FIELDS = frozenset(
    {
        "enrollmentDate",
        "dateOfBirth",
        "publishDate",
        "expiryDate",
        "startDate",
        "endDate",
        "established",
        "establishedDate",
        "joiningDate",
    }
)
INT_FIELDS = frozenset({"duration", "maxMarks", "passingMarks", "maxCapacity", "credits"})
NULLABLE_DATE_FIELDS = frozenset({"expiryDate", "dateOfBirth", "established", "establishedDate"})
INT_MINIMUMS: Mapping[str, int] = {
    "credits": 1,
    "duration": 1,
    "maxCapacity": 0,
    "maxMarks": 0,
    "passingMarks": 0,
}

SERVER_MANAGED_FIELDS = frozenset({"_id", "createdAt", "updatedAt"})

DEFAULT_MAX_CAPACITY = 30

REGISTRY_ENVELOPE = "registry"
PAGED_ENVELOPE = "paged"


@dataclass(frozen=True)
class ResourceSpec:
    """Describes one entity kind: storage, keys, fields and list behaviour."""

    kind: str
    label: str
    collection: str
    required: Tuple[str, ...]
    natural_keys: Tuple[str, ...] = ()
    unique_fields: Tuple[str, ...] = ()
    string_fields: Tuple[str, ...] = ()
    bool_fields: Tuple[str, ...] = ()
    list_fields: Tuple[str, ...] = ()
    set_fields: Tuple[str, ...] = ()
    object_id_fields: Tuple[str, ...] = ()
    lowercase_fields: Tuple[str, ...] = ()
    choices: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    defaults: Mapping[str, Any] = field(default_factory=dict)
    timestamp_defaults: Tuple[str, ...] = ()
    filter_params: Mapping[str, str] = field(default_factory=dict)
    bool_filter_params: Tuple[str, ...] = ()
    search_fields: Tuple[str, ...] = ()
    window_fields: Tuple[str, str] | None = None
    sort_fields: Mapping[str, str] = field(default_factory=dict)
    default_sort: str = "createdAt"
    envelope: str = REGISTRY_ENVELOPE
    upsert_on_natural_key: bool = False
    indexes: Tuple[IndexModel, ...] = ()

    @property
    def resource(self) -> str:
        return self.label.lower()


STUDENTS = ResourceSpec(
    kind="students",
    label="Student",
    collection="students",
    required=("name", "studentId", "email", "department"),
    natural_keys=("studentId",),
    unique_fields=("studentId", "email"),
    string_fields=("contactNumber", "address", "gender", "status"),
    list_fields=("courses",),
    lowercase_fields=("email",),
    defaults={"status": "active", "courses": []},
    timestamp_defaults=("enrollmentDate",),
    filter_params={"department": "department", "status": "status"},
    search_fields=("name", "studentId", "email"),
    sort_fields={
        "name": "name",
        "studentId": "studentId",
        "enrollmentDate": "enrollmentDate",
        "createdAt": "createdAt",
    },
    default_sort="name",
    upsert_on_natural_key=True,
    indexes=(
        IndexModel([("studentId", ASCENDING)], name="unique_student_id", unique=True),
        IndexModel([("email", ASCENDING)], name="unique_email", unique=True),
        IndexModel(
            [("department", ASCENDING), ("status", ASCENDING)],
            name="department_status",
        ),
        IndexModel([("enrollmentDate", DESCENDING)], name="enrollment_date"),
    ),
)

COURSES = ResourceSpec(
    kind="courses",
    label="Course",
    collection="courses",
    required=("courseCode", "name", "department", "credits"),
    natural_keys=("courseCode",),
    unique_fields=("courseCode",),
    string_fields=("description", "instructor", "status"),
    set_fields=("enrolledStudents",),
    choices={"status": ("active", "inactive", "archived")},
    defaults={"maxCapacity": DEFAULT_MAX_CAPACITY, "enrolledStudents": [], "status": "active"},
    filter_params={"department": "department", "status": "status", "instructor": "instructor"},
    search_fields=("name", "courseCode", "description"),
    sort_fields={
        "courseCode": "courseCode",
        "name": "name",
        "credits": "credits",
        "createdAt": "createdAt",
    },
    default_sort="courseCode",
    indexes=(
        IndexModel([("courseCode", ASCENDING)], name="unique_course_code", unique=True),
        IndexModel(
            [("department", ASCENDING), ("status", ASCENDING)],
            name="department_status",
        ),
        IndexModel([("enrolledStudents", ASCENDING)], name="enrolled_students"),
    ),
)

DEPARTMENTS = ResourceSpec(
    kind="departments",
    label="Department",
    collection="departments",
    required=("name", "code"),
    natural_keys=("code",),
    unique_fields=("code",),
    string_fields=("description", "headOfDepartment", "status"),
    list_fields=("courses",),
    object_id_fields=("faculty",),
    defaults={"status": "active", "faculty": [], "courses": []},
    filter_params={"code": "code", "status": "status"},
    search_fields=("name", "code", "description"),
    sort_fields={"code": "code", "name": "name", "createdAt": "createdAt"},
    default_sort="code",
    indexes=(
        IndexModel([("code", ASCENDING)], name="unique_code", unique=True),
        IndexModel([("status", ASCENDING)], name="status"),
    ),
)

FACULTY = ResourceSpec(
    kind="faculty",
    label="Faculty",
    collection="faculty",
    required=("name", "email", "facultyId", "department", "position"),
    natural_keys=("facultyId",),
    unique_fields=("facultyId", "email"),
    string_fields=(
        "specialization",
        "contactNumber",
        "officeLocation",
        "officeHours",
        "status",
    ),
    list_fields=("courses", "qualifications"),
    lowercase_fields=("email",),
    defaults={"status": "active", "courses": [], "qualifications": []},
    filter_params={"department": "department", "status": "status", "position": "position"},
    search_fields=("name", "facultyId", "email", "specialization"),
    sort_fields={
        "name": "name",
        "facultyId": "facultyId",
        "joiningDate": "joiningDate",
        "createdAt": "createdAt",
    },
    default_sort="name",
    indexes=(
        IndexModel([("facultyId", ASCENDING)], name="unique_faculty_id", unique=True),
        IndexModel([("email", ASCENDING)], name="unique_email", unique=True),
        IndexModel(
            [("department", ASCENDING), ("status", ASCENDING)],
            name="department_status",
        ),
    ),
)

EXAMINATIONS = ResourceSpec(
    kind="examinations",
    label="Examination",
    collection="examinations",
    required=("title", "type", "startDate", "endDate", "duration", "maxMarks"),
    string_fields=("academicTerm", "department", "venue", "instructions", "status"),
    bool_fields=("proctored", "allowCalculator", "allowBooks", "allowNotes", "onlineExam"),
    list_fields=("courses",),
    defaults={"courses": [], "status": "scheduled"},
    filter_params={
        "department": "department",
        "type": "type",
        "status": "status",
        "academicTerm": "academicTerm",
        "course": "courses",
    },
    search_fields=("title", "venue", "instructions"),
    sort_fields={
        "startDate": "startDate",
        "endDate": "endDate",
        "title": "title",
        "createdAt": "createdAt",
    },
    default_sort="startDate",
    indexes=(
        IndexModel(
            [("department", ASCENDING), ("type", ASCENDING)],
            name="department_type",
        ),
        IndexModel([("status", ASCENDING)], name="status"),
        IndexModel([("startDate", ASCENDING)], name="start_date"),
        IndexModel([("courses", ASCENDING)], name="courses"),
    ),
)

ANNOUNCEMENTS = ResourceSpec(
    kind="announcements",
    label="Announcement",
    collection="announcements",
    required=("title", "content", "type", "audience"),
    string_fields=("department",),
    bool_fields=("featured", "urgent", "sendEmail", "sendPushNotification"),
    list_fields=("attachments",),
    choices={"type": ("general", "academic", "event", "exam", "holiday", "emergency")},
    defaults={
        "expiryDate": None,
        "featured": False,
        "urgent": False,
        "attachments": [],
        "sendEmail": False,
        "sendPushNotification": False,
    },
    timestamp_defaults=("publishDate",),
    filter_params={"type": "type", "audience": "audience", "department": "department"},
    bool_filter_params=("featured", "urgent"),
    search_fields=("title", "content"),
    window_fields=("publishDate", "expiryDate"),
    sort_fields={
        "createdAt": "createdAt",
        "publishDate": "publishDate",
        "expiryDate": "expiryDate",
        "title": "title",
    },
    default_sort="-createdAt",
    envelope=PAGED_ENVELOPE,
    indexes=(
        IndexModel([("type", ASCENDING)], name="type"),
        IndexModel([("audience", ASCENDING)], name="audience"),
        IndexModel([("department", ASCENDING)], name="department"),
        IndexModel([("publishDate", ASCENDING)], name="publish_date"),
        IndexModel([("expiryDate", ASCENDING)], name="expiry_date"),
        IndexModel(
            [("featured", ASCENDING), ("urgent", ASCENDING)],
            name="featured_urgent",
        ),
    ),
)

RESOURCES: Dict[str, ResourceSpec] = {
    spec.kind: spec
    for spec in (STUDENTS, COURSES, DEPARTMENTS, FACULTY, EXAMINATIONS, ANNOUNCEMENTS)
}


def get_resource_spec(kind: str) -> ResourceSpec:
    try:
        return RESOURCES[kind]
    except KeyError:
        raise InvalidIdentifierError(f"Unknown resource kind '{kind}'.") from None


__all__ = [
    "ResourceSpec",
    "RESOURCES",
    "STUDENTS",
    "COURSES",
    "DEPARTMENTS",
    "FACULTY",
    "EXAMINATIONS",
    "ANNOUNCEMENTS",
    "DATE_FIELDS",
    "INT_FIELDS",
    "SERVER_MANAGED_FIELDS",
    "DEFAULT_MAX_CAPACITY",
    "REGISTRY_ENVELOPE",
    "PAGED_ENVELOPE",
    "get_resource_spec",
]
