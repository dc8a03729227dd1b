from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceEntry, AttendanceRecord


class AttendanceRepository(Protocol):
    def upsert_batch(
        self,
        *,
        subject_id: str,
        on_date: date,
        semester_id: str,
        entries: Sequence[AttendanceEntry],
        marked_by: str,
        updated_at: datetime,
    ) -> int:
        """Insert or update every entry in ONE transaction.

        Existing rows keep their semester_id; new rows take ``semester_id``.
        Returns the number of entries processed.
        """

        raise NotImplementedError

    def list_for_subject_date(
        self,
        *,
        subject_id: str,
        on_date: date,
        marked_by: Optional[str] = None,
    ) -> Sequence[AttendanceEntry]:
        """Ordered by (period, student_id)."""

        raise NotImplementedError

    def list_for_student(
        self,
        *,
        student_id: str,
        semester_id: Optional[str] = None,
        subject_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        """Ordered by (date, period)."""

        raise NotImplementedError

    def list_for_student_date(self, *, student_id: str, on_date: date) -> Sequence[AttendanceRecord]:
        """Ordered by period."""

        raise NotImplementedError

    def list_for_student_range(self, *, student_id: str, start: date, end: date) -> Sequence[AttendanceRecord]:
        """Both ends inclusive, ordered by (date, period)."""

        raise NotImplementedError
