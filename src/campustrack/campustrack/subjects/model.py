from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Subject:
    subject_id: str
    code: str
    name: str
    department_id: str
    semester_id: str
    is_mdc: bool = False


@dataclass(frozen=True)
class Faculty:
    """Faculty profile joined with its user account."""

    faculty_id: str
    user_id: str
    name: str
    employee_id: str
    department_id: str
    is_active: bool = True
