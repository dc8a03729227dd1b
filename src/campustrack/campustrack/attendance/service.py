from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import coerce_date, now_local
from ..common.session import Caller, require_role
from ..core.constants import PERIODS_PER_DAY, REST_DAY, STUDENT_ATTENDANCE_LINK
from ..core.enums import AttendanceStatus, NotificationType, Role
from ..core.exceptions import AuthorizationError, FutureDateError, NotFoundError, ValidationError
from ..core.result import as_result
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.model import NotificationPayload
from ..students.repository import StudentRepository
from ..subjects.repository import FacultyRepository, SubjectRepository
from ..timetable.repository import TimetableRepository
from .model import AttendanceEntry, AttendanceRecord, SubmitResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def parse_entries(records: Iterable[Any]) -> list[AttendanceEntry]:
    """Normalize caller input (entries or dicts) into validated AttendanceEntry values."""
    entries: list[AttendanceEntry] = []
    for raw in records or []:
        if isinstance(raw, AttendanceEntry):
            student_id, period, status = raw.student_id, raw.period, raw.status
        elif isinstance(raw, Mapping):
            student_id = raw.get("student_id") or raw.get("studentId")
            period = raw.get("period")
            status = raw.get("status")
        else:
            raise ValidationError("Invalid attendance record")

        if not student_id:
            raise ValidationError("Student is required for every record")
        try:
            period = int(period)
        except (TypeError, ValueError):
            raise ValidationError("Period must be a number")
        if period < 1 or period > PERIODS_PER_DAY:
            raise ValidationError(f"Period must be between 1 and {PERIODS_PER_DAY}")
        try:
            status = AttendanceStatus(str(getattr(status, "value", status)).upper())
        except ValueError:
            raise ValidationError(f"Invalid attendance status: {status!r}")

        entries.append(AttendanceEntry(student_id=str(student_id), period=period, status=status))
    return entries


class AttendanceService:
    """Attendance record store plus the instructor-facing marking use case.

    ``submit_batch`` trusts its caller for authorization; ``mark_attendance``
    is that caller: it checks the session role and the instructor assignment
    before delegating.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        subjects: SubjectRepository,
        students: StudentRepository,
        faculty: FacultyRepository,
        timetable: TimetableRepository,
        notifier: Optional[NotificationDispatcher] = None,
    ):
        self._attendance = attendance
        self._subjects = subjects
        self._students = students
        self._faculty = faculty
        self._timetable = timetable
        self._notifier = notifier

    def _submit(
        self,
        subject_id: str,
        on_date: Any,
        records: Sequence[Any],
        marked_by: str,
        *,
        today: Optional[date] = None,
    ) -> SubmitResult:
        on_date = coerce_date(on_date)
        entries = parse_entries(records)
        if not entries:
            raise ValidationError("At least one attendance record is required")

        today = today or now_local().date()
        if on_date > today:
            raise FutureDateError("Cannot mark attendance for a future date")

        subject = self._subjects.get_by_id(subject_id)
        if not subject:
            raise NotFoundError("Subject not found")

        count = self._attendance.upsert_batch(
            subject_id=subject.subject_id,
            on_date=on_date,
            semester_id=subject.semester_id,
            entries=entries,
            marked_by=marked_by,
            updated_at=now_local(),
        )
        logger.info("Attendance saved: subject=%s date=%s records=%d by=%s", subject_id, on_date, count, marked_by)
        return SubmitResult(count=len(entries), date=on_date)

    @as_result
    def submit_batch(
        self,
        subject_id: str,
        on_date: Any,
        records: Sequence[Any],
        marked_by: str,
        *,
        today: Optional[date] = None,
    ) -> SubmitResult:
        return self._submit(subject_id, on_date, records, marked_by, today=today)

    @as_result
    def get_by_date(self, subject_id: str, on_date: Any, marked_by: Optional[str] = None) -> list[AttendanceEntry]:
        on_date = coerce_date(on_date)
        return list(self._attendance.list_for_subject_date(subject_id=subject_id, on_date=on_date, marked_by=marked_by))

    @as_result
    def day_for_student(self, student_id: str, on_date: Any) -> list[AttendanceRecord]:
        on_date = coerce_date(on_date)
        return list(self._attendance.list_for_student_date(student_id=student_id, on_date=on_date))

    @as_result
    def mark_attendance(
        self,
        caller: Optional[Caller],
        subject_id: str,
        on_date: Any,
        records: Sequence[Any],
        *,
        today: Optional[date] = None,
    ) -> SubmitResult:
        caller = require_role(caller, Role.FACULTY)

        faculty = self._faculty.get_by_user_id(caller.user_id)
        if not faculty:
            raise NotFoundError("Faculty profile not found")

        if not self._subjects.is_assigned(faculty.faculty_id, subject_id):
            raise AuthorizationError("You are not assigned to this subject")

        subject = self._subjects.get_by_id(subject_id)
        if not subject:
            raise NotFoundError("Subject not found")

        on_date = coerce_date(on_date)
        if on_date.isoweekday() == REST_DAY:
            raise ValidationError("No classes on Sunday")
        if not self._timetable.is_scheduled(
            subject_id=subject.subject_id,
            day_of_week=on_date.isoweekday(),
            semester_id=subject.semester_id,
        ):
            raise ValidationError("Subject not scheduled for this day")

        entries = parse_entries(records)
        student_ids = list(dict.fromkeys(e.student_id for e in entries))
        students = [s for s in self._students.get_by_ids(student_ids) if s.semester_id == subject.semester_id]
        if len(students) != len(student_ids):
            raise ValidationError("Some students not found or not in this semester")

        result = self._submit(subject_id, on_date, entries, faculty.faculty_id, today=today)

        if self._notifier:
            self._notifier.notify_many(
                [s.user_id for s in students],
                NotificationPayload(
                    title="Attendance Marked",
                    message=f"Attendance for {subject.name} on {on_date.isoformat()} has been recorded",
                    link=STUDENT_ATTENDANCE_LINK,
                    type=NotificationType.ATTENDANCE,
                ),
            )
        return result
