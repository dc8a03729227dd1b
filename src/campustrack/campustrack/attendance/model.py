from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance decision.

    Identity is (student_id, subject_id, date, period); only status,
    marked_by and updated_at change after the first write.
    """

    student_id: str
    subject_id: str
    date: date
    period: int
    status: AttendanceStatus
    semester_id: Optional[str]
    marked_by: str
    updated_at: Optional[datetime] = None
    subject_name: Optional[str] = None
    marked_by_name: Optional[str] = None

    @property
    def key(self) -> tuple[str, str, date, int]:
        return (self.student_id, self.subject_id, self.date, self.period)


@dataclass(frozen=True)
class AttendanceEntry:
    """One per-student decision inside a batch (also the editing-sheet read model)."""

    student_id: str
    period: int
    status: AttendanceStatus


@dataclass(frozen=True)
class SubmitResult:
    count: int
    date: date
