from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Faculty, Subject


class SubjectRepository(Protocol):
    def get_by_id(self, subject_id: str) -> Optional[Subject]:
        raise NotImplementedError

    def is_assigned(self, faculty_id: str, subject_id: str) -> bool:
        """Instructor-of-record check (faculty_subjects row exists)."""

        raise NotImplementedError

    def list_mdc_subjects(self, *, department_id: str, exclude_department_id: str) -> Sequence[Subject]:
        raise NotImplementedError


class FacultyRepository(Protocol):
    def get_by_id(self, faculty_id: str) -> Optional[Faculty]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: str) -> Optional[Faculty]:
        raise NotImplementedError

    def list_active_in_department(self, department_id: str) -> Sequence[Faculty]:
        raise NotImplementedError
