from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class MDCCourse:
    """Cross-department elective with an explicit roster.

    ``year``/``semester`` are plain labels of the students' academic year at
    enrollment time, not references to the Semester entity. ``student_ids`` is
    stored as-is and never reconciled with a student's live department.
    """

    course_id: str
    course_name: str
    home_department_id: str
    mdc_department_id: str
    year: int
    semester: int
    student_ids: FrozenSet[str] = field(default_factory=frozenset)
    faculty_id: Optional[str] = None

    @property
    def student_count(self) -> int:
        return len(self.student_ids)

    def has_student(self, student_id: str) -> bool:
        return student_id in self.student_ids


@dataclass(frozen=True)
class MDCCourseInput:
    home_department_id: str
    mdc_department_id: str
    year: int
    semester: int
    course_name: str
    student_ids: FrozenSet[str]
    faculty_id: Optional[str] = None


@dataclass(frozen=True)
class MDCMark:
    student_id: str
    status: AttendanceStatus


@dataclass(frozen=True)
class MDCStudentMark:
    """One MDC period mark as seen from the student's side."""

    course_id: str
    course_name: str
    period: int
    status: AttendanceStatus
    marked_by: str
    marked_by_name: Optional[str] = None
