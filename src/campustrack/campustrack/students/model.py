from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Student profile joined with its user account.

    ``semester_id`` is the current placement; it only changes together with a
    semester history row (see SemesterTransitionService).
    """

    student_id: str
    user_id: str
    name: str
    enrollment_no: str
    department_id: str
    semester_id: str
    admission_year: Optional[int] = None
    current_year: Optional[int] = None
    is_active: bool = True
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass(frozen=True)
class RosterEntry:
    student_id: str
    enrollment_no: str
    name: str


@dataclass(frozen=True)
class HistoryEntry:
    semester_id: str
    semester_name: str
    changed_at: datetime
    changed_by: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class TransitionResult:
    student_id: str
    new_semester_name: str


def default_transition_reason(old_semester_name: Optional[str], new_semester_name: str) -> str:
    return f"Manual Update: {old_semester_name or 'Unknown'} → {new_semester_name}"
