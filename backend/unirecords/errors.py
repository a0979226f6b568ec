"""Error taxonomy shared by the repositories, the ledger and the routes."""

from __future__ import annotations

from typing import Any, Dict


class RecordsError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    default_message = "Internal server error."

    def __init__(self, message: str | None = None, *, details: Dict[str, Any] | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details or {}


class InvalidIdentifierError(RecordsError):
    """Raised when a lookup token cannot identify any document."""

    status_code = 400
    default_message = "Invalid identifier."


class ValidationError(RecordsError):
    """Raised when a payload is missing required fields or has bad values."""

    status_code = 400
    default_message = "Validation failed."


class DuplicateRecordError(RecordsError):
    """Raised when a write would break a uniqueness constraint."""

    status_code = 400

    def __init__(self, resource: str, field: str, value: Any):
        super().__init__(
            f"{resource} with {field} '{value}' already exists.",
            details={field: f"{field} already in use."},
        )
        self.field = field
        self.value = value


class NotFoundError(RecordsError):
    status_code = 404
    default_message = "Record not found."


class AlreadyEnrolledError(RecordsError):
    status_code = 400
    default_message = "Student is already enrolled in this course."


class NotEnrolledError(RecordsError):
    status_code = 400
    default_message = "Student is not enrolled in this course."


class CapacityExceededError(RecordsError):
    status_code = 400
    default_message = "Course has reached maximum capacity."


class StorageUnavailableError(RecordsError):
    """Raised when MongoDB cannot be reached or rejects an operation."""

    status_code = 500
    default_message = "Database unavailable. Please try again later."


class InternalError(RecordsError):
    status_code = 500


__all__ = [
    "RecordsError",
    "InvalidIdentifierError",
    "ValidationError",
    "DuplicateRecordError",
    "NotFoundError",
    "AlreadyEnrolledError",
    "NotEnrolledError",
    "CapacityExceededError",
    "StorageUnavailableError",
    "InternalError",
]
