"""
Row-level rejection kinds and the pre-flight error that aborts a whole upload.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    MISSING_FIELD = "MissingField"
    INVALID_SCHOLARSHIP_ID = "InvalidScholarshipId"
    INVALID_DATE = "InvalidDate"
    SCHOLARSHIP_NOT_FOUND = "ScholarshipNotFound"
    SCHOLARSHIP_INACTIVE = "ScholarshipInactive"
    DEADLINE_PASSED = "DeadlinePassed"
    ACADEMIC_LEVEL_MISMATCH = "AcademicLevelMismatch"
    GPA_BELOW_MINIMUM = "GpaBelowMinimum"
    CAPACITY_REACHED = "CapacityReached"
    DUPLICATE_IN_BATCH = "DuplicateInBatch"
    DUPLICATE_IN_DB = "DuplicateInDb"
    DB_INSERT_FAILURE = "DbInsertFailure"


DUPLICATE_KINDS = {ErrorKind.DUPLICATE_IN_BATCH, ErrorKind.DUPLICATE_IN_DB}


@dataclass(frozen=True)
class RowError:
    """A terminal, non-fatal rejection of a single row."""

    kind: ErrorKind
    message: str

    @property
    def is_duplicate(self) -> bool:
        return self.kind in DUPLICATE_KINDS


class PreflightError(Exception):
    """Upload cannot be processed at all (HTTP 400)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
