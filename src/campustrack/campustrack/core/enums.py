from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller roles resolved from the session."""

    ADMIN = "ADMIN"
    FACULTY = "FACULTY"
    STUDENT = "STUDENT"


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"


class BlockStatus(str, Enum):
    """Per-period state on the student's daily bar."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    NOT_MARKED = "NOT_MARKED"


class DayType(str, Enum):
    WEEKDAY = "WEEKDAY"
    SHORT_DAY = "SHORT_DAY"
    REST_DAY = "REST_DAY"


class NotificationType(str, Enum):
    ATTENDANCE = "ATTENDANCE"
    SYSTEM = "SYSTEM"


class ErrorKind(str, Enum):
    """Failure kinds carried by ActionResult."""

    VALIDATION = "VALIDATION"
    FUTURE_DATE = "FUTURE_DATE"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    DELETED = "DELETED"
    NO_CHANGE = "NO_CHANGE"
    INVALID_SEMESTER = "INVALID_SEMESTER"
    DUPLICATE = "DUPLICATE"
