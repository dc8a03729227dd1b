from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional

from ..common.datetime_utils import coerce_date, now_local
from ..common.session import Caller, require_role
from ..common.validators import require_in_range, require_non_empty
from ..core.constants import PERIODS_PER_DAY, REST_DAY
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DuplicateError, NotFoundError, ValidationError
from ..core.result import as_result
from ..students.model import Student
from ..students.repository import StudentRepository
from ..subjects.model import Faculty
from ..subjects.repository import FacultyRepository, SubjectRepository
from .model import ScheduledSubject, TimetableEntry, TimetableEntryInput
from .repository import TimetableRepository

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("day_of_week", "period", "subject_id", "faculty_id", "department_id", "semester_id", "room")


def _require_admin(current_role: Role) -> None:
    if current_role != Role.ADMIN:
        raise AuthorizationError("Unauthorized: admin access required")


def _teaching_day(value: date) -> Optional[int]:
    day = value.isoweekday()
    return None if day == REST_DAY else day


class TimetableService:
    """Weekly timetable: admin editing plus the instructor and student views.

    Every cohort slot holds at most one entry. Writing an entry also grants the
    instructor the subject (``faculty_subjects``), which is what the attendance
    marking check reads.
    """

    def __init__(
        self,
        timetable: TimetableRepository,
        subjects: SubjectRepository,
        faculty: FacultyRepository,
        students: StudentRepository,
    ):
        self._timetable = timetable
        self._subjects = subjects
        self._faculty = faculty
        self._students = students

    # -- admin -----------------------------------------------------------

    def _validate(self, data: TimetableEntryInput) -> TimetableEntryInput:
        day_of_week = require_in_range(data.day_of_week, "Day of week", 1, REST_DAY - 1)
        period = require_in_range(data.period, "Period", 1, PERIODS_PER_DAY)
        department_id = require_non_empty(data.department_id or "", "Department")
        semester_id = require_non_empty(data.semester_id or "", "Semester")

        subject = self._subjects.get_by_id(data.subject_id)
        if not subject or subject.department_id != department_id or subject.semester_id != semester_id:
            raise ValidationError("Subject not found in this department/semester")

        faculty = self._faculty.get_by_id(data.faculty_id)
        if not faculty or faculty.department_id != department_id:
            raise ValidationError("Faculty not found in this department")

        room = (data.room or "").strip() or None
        return TimetableEntryInput(
            day_of_week=day_of_week,
            period=period,
            subject_id=subject.subject_id,
            faculty_id=faculty.faculty_id,
            department_id=department_id,
            semester_id=semester_id,
            room=room,
        )

    def _check_slot_free(self, data: TimetableEntryInput, *, entry_id: Optional[str] = None) -> None:
        taken = self._timetable.find_slot(
            day_of_week=data.day_of_week,
            period=data.period,
            department_id=data.department_id,
            semester_id=data.semester_id,
        )
        if taken and taken.entry_id != entry_id:
            raise DuplicateError("Slot already occupied. Please delete the existing entry first.")

    @as_result
    def cohort_timetable(self, *, current_role: Role, department_id: str, semester_id: str) -> list[TimetableEntry]:
        _require_admin(current_role)
        if not department_id or not semester_id:
            raise ValidationError("Department ID and Semester ID are required")
        return list(self._timetable.list_for_cohort(department_id=department_id, semester_id=semester_id))

    @as_result
    def create_entry(self, *, current_role: Role, data: TimetableEntryInput) -> str:
        _require_admin(current_role)
        data = self._validate(data)
        self._check_slot_free(data)

        entry_id = self._timetable.create(data)
        logger.info(
            "Timetable entry %s created: day=%d period=%d subject=%s faculty=%s",
            entry_id,
            data.day_of_week,
            data.period,
            data.subject_id,
            data.faculty_id,
        )
        return entry_id

    @as_result
    def update_entry(self, *, current_role: Role, entry_id: str, changes: Mapping[str, Any]) -> TimetableEntry:
        """Apply a partial change; fields missing from ``changes`` keep their value."""
        _require_admin(current_role)
        existing = self._timetable.get_by_id(entry_id)
        if not existing:
            raise NotFoundError("Timetable entry not found")

        merged = TimetableEntryInput(
            **{name: changes.get(name, getattr(existing, name)) for name in _EDITABLE_FIELDS}
        )
        data = self._validate(merged)
        self._check_slot_free(data, entry_id=entry_id)

        if not self._timetable.update(entry_id=entry_id, data=data):
            raise NotFoundError("Timetable entry not found")
        logger.info("Timetable entry %s updated", entry_id)

        updated = self._timetable.get_by_id(entry_id)
        if not updated:
            raise NotFoundError("Timetable entry not found")
        return updated

    @as_result
    def delete_entry(self, *, current_role: Role, entry_id: str) -> str:
        _require_admin(current_role)
        if not self._timetable.delete(entry_id):
            raise NotFoundError("Timetable entry not found")
        logger.info("Timetable entry %s deleted", entry_id)
        return entry_id

    # -- instructor ------------------------------------------------------

    def _faculty_for(self, caller: Optional[Caller]) -> Faculty:
        caller = require_role(caller, Role.FACULTY)
        faculty = self._faculty.get_by_user_id(caller.user_id)
        if not faculty:
            raise NotFoundError("Faculty profile not found")
        return faculty

    @as_result
    def faculty_timetable(self, caller: Optional[Caller], day_of_week: Optional[int] = None) -> list[TimetableEntry]:
        faculty = self._faculty_for(caller)
        if day_of_week is not None:
            day_of_week = require_in_range(day_of_week, "Day of week", 1, REST_DAY - 1)
        return list(self._timetable.list_for_faculty(faculty.faculty_id, day_of_week))

    @as_result
    def today_classes(self, caller: Optional[Caller], *, today: Optional[date] = None) -> list[TimetableEntry]:
        faculty = self._faculty_for(caller)
        day = _teaching_day(today or now_local().date())
        if day is None:
            return []
        return list(self._timetable.list_for_faculty(faculty.faculty_id, day))

    @as_result
    def subjects_for_date(self, caller: Optional[Caller], on_date: Any) -> list[ScheduledSubject]:
        """Subjects the instructor teaches on ``on_date``, in first-period order."""
        faculty = self._faculty_for(caller)
        day = _teaching_day(coerce_date(on_date))
        if day is None:
            return []

        grouped: dict[str, ScheduledSubject] = {}
        for entry in self._timetable.list_for_faculty(faculty.faculty_id, day):
            item = grouped.get(entry.subject_id)
            if item is None:
                item = ScheduledSubject(
                    subject_id=entry.subject_id,
                    subject_name=entry.subject_name,
                    semester_id=entry.semester_id,
                )
                grouped[entry.subject_id] = item
            item.periods.append(entry.period)
        return list(grouped.values())

    # -- student ---------------------------------------------------------

    def _student_for(self, caller: Optional[Caller]) -> Student:
        caller = require_role(caller, Role.STUDENT)
        student = self._students.get_by_user_id(caller.user_id)
        if not student:
            raise NotFoundError("Student profile not found")
        return student

    @as_result
    def student_timetable(self, caller: Optional[Caller]) -> list[TimetableEntry]:
        student = self._student_for(caller)
        return list(
            self._timetable.list_for_cohort(department_id=student.department_id, semester_id=student.semester_id)
        )

    @as_result
    def today_schedule(self, caller: Optional[Caller], *, today: Optional[date] = None) -> list[TimetableEntry]:
        student = self._student_for(caller)
        day = _teaching_day(today or now_local().date())
        if day is None:
            return []
        return list(
            self._timetable.list_for_cohort(
                department_id=student.department_id,
                semester_id=student.semester_id,
                day_of_week=day,
            )
        )
