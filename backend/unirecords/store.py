"""Container wiring repositories and the enrollment ledger to a database."""

from __future__ import annotations

from typing import Dict

from pymongo.database import Database

from .enrollment import EnrollmentLedger
from .entities import COURSES, RESOURCES, get_resource_spec
from .repository import ResourceRepository


class RecordStore:
    """Holds one repository per entity kind, all sharing one database handle."""

    def __init__(self, database: Database) -> None:
        self.database = database
        self._repositories: Dict[str, ResourceRepository] = {
            kind: ResourceRepository(database[spec.collection], spec)
            for kind, spec in RESOURCES.items()
        }
        self.enrollment = EnrollmentLedger(self._repositories[COURSES.kind])

    def repository(self, kind: str) -> ResourceRepository:
        return self._repositories[get_resource_spec(kind).kind]


__all__ = ["RecordStore"]
