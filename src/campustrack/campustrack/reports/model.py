from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Optional

from ..core.enums import AttendanceStatus, BlockStatus


@dataclass(frozen=True)
class AttendanceStats:
    total: int
    present: int
    absent: int
    percentage: int


@dataclass(frozen=True)
class SubjectStats:
    subject_id: str
    present: int
    total: int
    percentage: int
    subject_name: Optional[str] = None


@dataclass(frozen=True)
class CalendarBuckets:
    present_dates: FrozenSet[date] = field(default_factory=frozenset)
    absent_dates: FrozenSet[date] = field(default_factory=frozenset)


@dataclass(frozen=True)
class SemesterSummary:
    """Read-model for the student attendance page."""

    overall: AttendanceStats
    subjects: list[SubjectStats]
    calendar: CalendarBuckets


@dataclass(frozen=True)
class DailyBlock:
    """One period on the daily bar; ``faculty_name`` is None while NOT_MARKED."""

    period: int
    status: BlockStatus
    faculty_name: Optional[str] = None


@dataclass(frozen=True)
class PeriodMark:
    period: int
    status: AttendanceStatus
    subject_id: str
    subject_name: Optional[str] = None


@dataclass(frozen=True)
class DayAttendance:
    date: date
    periods: list[PeriodMark] = field(default_factory=list)
