from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import TimetableEntry, TimetableEntryInput


class TimetableRepository(Protocol):
    """Weekly timetable persistence.

    Note: writes keep ``faculty_subjects`` in step with the timetable in the
    same transaction: a mapping exists while at least one entry uses it.
    """

    def get_by_id(self, entry_id: str) -> Optional[TimetableEntry]:
        raise NotImplementedError

    def find_slot(
        self, *, day_of_week: int, period: int, department_id: str, semester_id: str
    ) -> Optional[TimetableEntry]:
        raise NotImplementedError

    def is_scheduled(self, *, subject_id: str, day_of_week: int, semester_id: str) -> bool:
        raise NotImplementedError

    def list_for_cohort(
        self, *, department_id: str, semester_id: str, day_of_week: Optional[int] = None
    ) -> Sequence[TimetableEntry]:
        """Ordered by (day_of_week, period)."""

        raise NotImplementedError

    def list_for_faculty(self, faculty_id: str, day_of_week: Optional[int] = None) -> Sequence[TimetableEntry]:
        """Ordered by (day_of_week, period)."""

        raise NotImplementedError

    def create(self, data: TimetableEntryInput) -> str:
        raise NotImplementedError

    def update(self, *, entry_id: str, data: TimetableEntryInput) -> bool:
        raise NotImplementedError

    def delete(self, entry_id: str) -> bool:
        raise NotImplementedError
