from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class TimetableEntry:
    """One weekly slot: a subject taught in a (day, period) for a cohort.

    A cohort is a (department, semester) pair and holds at most one entry per
    slot. ``day_of_week`` is ISO numbering, 1=Monday ... 6=Saturday.
    """

    entry_id: str
    day_of_week: int
    period: int
    subject_id: str
    faculty_id: str
    department_id: str
    semester_id: str
    room: Optional[str] = None
    subject_name: Optional[str] = None
    subject_code: Optional[str] = None
    faculty_name: Optional[str] = None


@dataclass(frozen=True)
class TimetableEntryInput:
    day_of_week: int
    period: int
    subject_id: str
    faculty_id: str
    department_id: str
    semester_id: str
    room: Optional[str] = None


@dataclass(frozen=True)
class ScheduledSubject:
    """A subject an instructor teaches on one date, with its periods in order."""

    subject_id: str
    subject_name: Optional[str]
    semester_id: str
    periods: list[int] = field(default_factory=list)
