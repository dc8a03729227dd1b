from __future__ import annotations

from datetime import date
from typing import FrozenSet, Optional, Protocol, Sequence

from .model import MDCCourse, MDCCourseInput, MDCMark, MDCStudentMark


class MDCCourseRepository(Protocol):
    def get_by_id(self, course_id: str) -> Optional[MDCCourse]:
        raise NotImplementedError

    def find_by_key(
        self, *, home_department_id: str, mdc_department_id: str, year: int, semester: int
    ) -> Optional[MDCCourse]:
        raise NotImplementedError

    def list_for_pair(self, *, home_department_id: str, mdc_department_id: str) -> Sequence[MDCCourse]:
        raise NotImplementedError

    def list_for_home(self, home_department_id: str) -> Sequence[MDCCourse]:
        raise NotImplementedError

    def list_for_faculty(self, faculty_id: str) -> Sequence[MDCCourse]:
        """Ordered by (year, semester)."""

        raise NotImplementedError

    def create(self, data: MDCCourseInput) -> str:
        raise NotImplementedError

    def update(self, *, course_id: str, course_name: str, student_ids: FrozenSet[str], faculty_id: Optional[str]) -> bool:
        raise NotImplementedError

    def delete(self, course_id: str) -> bool:
        raise NotImplementedError

    def set_faculty(self, *, course_id: str, faculty_id: Optional[str]) -> bool:
        """True only when the row actually changed (MySQL affected-row semantics)."""

        raise NotImplementedError

    def add_student(self, *, course_id: str, student_id: str) -> Optional[FrozenSet[str]]:
        """Add one id under a row lock. Returns the new set, or None if the course is gone."""

        raise NotImplementedError

    def remove_student(self, *, course_id: str, student_id: str) -> Optional[FrozenSet[str]]:
        raise NotImplementedError

    def upsert_attendance(
        self,
        *,
        course_id: str,
        on_date: date,
        period: int,
        marks: Sequence[MDCMark],
        marked_by: str,
    ) -> int:
        raise NotImplementedError

    def list_attendance(self, *, course_id: str, on_date: date, period: int) -> Sequence[MDCMark]:
        raise NotImplementedError

    def list_attendance_for_student_date(self, *, student_id: str, on_date: date) -> Sequence[MDCStudentMark]:
        """Every MDC mark the student received on a date, ordered by period."""

        raise NotImplementedError
