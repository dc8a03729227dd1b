from __future__ import annotations

import logging
from typing import Optional

from ..core.constants import STUDENT_PROFILE_LINK
from ..core.enums import NotificationType, Role
from ..core.exceptions import (
    AuthorizationError,
    DeletedError,
    InvalidSemesterError,
    NoChangeError,
    NotFoundError,
)
from ..core.result import as_result
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.model import NotificationPayload
from .model import HistoryEntry, TransitionResult
from .repository import StudentRepository
from .semester_repository import SemesterRepository

logger = logging.getLogger(__name__)


class SemesterTransitionService:
    """Use case: move a student to another semester, with an audit row.

    The student's ``semester_id`` and the history ledger change together or not
    at all; the newest history row always names the current semester.
    """

    def __init__(
        self,
        students: StudentRepository,
        semesters: SemesterRepository,
        notifier: Optional[NotificationDispatcher] = None,
    ):
        self._students = students
        self._semesters = semesters
        self._notifier = notifier

    @as_result
    def transition(
        self,
        *,
        current_role: Role,
        student_id: str,
        new_semester_id: str,
        changed_by: str,
        reason: Optional[str] = None,
    ) -> TransitionResult:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Unauthorized: admin access required")

        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        if student.is_deleted:
            raise DeletedError("Cannot update deleted student")

        new_semester = self._semesters.get_by_id(new_semester_id)
        if not new_semester:
            raise InvalidSemesterError("Invalid semester selected")

        if student.semester_id == new_semester_id:
            raise NoChangeError("Student is already in this semester")

        # Re-checked under a row lock by the repository.
        old_name = self._students.apply_semester_transition(
            student_id=student_id,
            new_semester_id=new_semester_id,
            new_semester_name=new_semester.name,
            current_year=new_semester.academic_year,
            changed_by=changed_by,
            reason=(reason or "").strip() or None,
        )
        logger.info("Student %s moved %s -> %s by %s", student_id, old_name, new_semester.name, changed_by)

        if self._notifier:
            self._notifier.notify(
                student.user_id,
                NotificationPayload(
                    title="Semester Updated",
                    message=f"Your semester has been updated to {new_semester.name}",
                    link=STUDENT_PROFILE_LINK,
                    type=NotificationType.SYSTEM,
                ),
            )

        return TransitionResult(student_id=student_id, new_semester_name=new_semester.name)

    @as_result
    def history(self, student_id: str) -> list[HistoryEntry]:
        return list(self._students.list_history(student_id))

    @as_result
    def roster(self, *, semester_id: str, department_id: str):
        return list(self._students.students_in(semester_id, department_id))
