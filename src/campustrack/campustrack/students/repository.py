from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import HistoryEntry, RosterEntry, Student


class StudentRepository(Protocol):
    """Student persistence.

    Note: ``apply_semester_transition`` must lock the student row, re-check it,
    update it and append the history row in one transaction.
    """

    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_ids(self, student_ids: Sequence[str]) -> Sequence[Student]:
        raise NotImplementedError

    def students_in(self, semester_id: str, department_id: str) -> Sequence[RosterEntry]:
        """Active roster of a semester/department cohort, ordered by enrollment number."""

        raise NotImplementedError

    def apply_semester_transition(
        self,
        *,
        student_id: str,
        new_semester_id: str,
        new_semester_name: str,
        current_year: int,
        changed_by: str,
        reason: Optional[str] = None,
    ) -> str:
        """Move the student and return the name of the semester they left.

        Raises NotFoundError, DeletedError or NoChangeError from the locked
        read. A blank ``reason`` is replaced by ``default_transition_reason``.
        """

        raise NotImplementedError

    def list_history(self, student_id: str) -> Sequence[HistoryEntry]:
        """Newest first."""

        raise NotImplementedError
