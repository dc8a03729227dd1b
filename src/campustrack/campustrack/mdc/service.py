from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import coerce_date, now_local
from ..common.session import Caller, require_role
from ..common.validators import require_in_range, require_non_empty
from ..core.constants import (
    MDC_MAX_SEMESTER,
    MDC_MAX_YEAR,
    MDC_MIN_SEMESTER,
    MDC_MIN_YEAR,
    PERIODS_PER_DAY,
)
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import (
    AuthorizationError,
    DeletedError,
    FutureDateError,
    NotFoundError,
    ValidationError,
)
from ..core.result import as_result
from ..attendance.model import SubmitResult
from ..students.model import RosterEntry
from ..students.repository import StudentRepository
from ..subjects.model import Faculty, Subject
from ..subjects.repository import FacultyRepository, SubjectRepository
from .model import MDCCourse, MDCCourseInput, MDCMark
from .repository import MDCCourseRepository

logger = logging.getLogger(__name__)


def _require_admin(current_role: Role) -> None:
    if current_role != Role.ADMIN:
        raise AuthorizationError("Unauthorized: admin access required")


def _parse_marks(records: Iterable[Any]) -> list[MDCMark]:
    marks: list[MDCMark] = []
    for raw in records or []:
        if isinstance(raw, MDCMark):
            marks.append(raw)
            continue
        if not isinstance(raw, Mapping):
            raise ValidationError("Invalid attendance record")
        student_id = raw.get("student_id") or raw.get("studentId")
        if not student_id:
            raise ValidationError("Student is required for every record")
        try:
            status = AttendanceStatus(str(raw.get("status", "")).upper())
        except ValueError:
            raise ValidationError(f"Invalid attendance status: {raw.get('status')!r}")
        marks.append(MDCMark(student_id=str(student_id), status=status))
    return marks


class MDCEnrollmentService:
    """Cross-department elective catalogue, rosters and MDC attendance.

    Rosters are explicit id sets on the course row. Enrollment is checked
    against the student's department only at the moment of enrollment; later
    transfers do not revoke a seat. Double enrollment in two courses of the
    same home department and year/semester is not prevented.
    """

    def __init__(
        self,
        courses: MDCCourseRepository,
        subjects: SubjectRepository,
        faculty: FacultyRepository,
        students: StudentRepository,
    ):
        self._courses = courses
        self._subjects = subjects
        self._faculty = faculty
        self._students = students

    # -- catalogue -------------------------------------------------------

    @as_result
    def eligible_courses(self, home_department_id: str, mdc_department_id: str) -> list[Subject]:
        if home_department_id == mdc_department_id:
            return []
        subjects = self._subjects.list_mdc_subjects(
            department_id=mdc_department_id,
            exclude_department_id=home_department_id,
        )
        return [s for s in subjects if s.is_mdc and s.department_id != home_department_id]

    @as_result
    def eligible_faculty(self, course_id: str) -> list[Faculty]:
        course = self._get_course(course_id)
        return self._eligible_faculty_for(course.mdc_department_id)

    def _eligible_faculty_for(self, mdc_department_id: str) -> list[Faculty]:
        return [
            f
            for f in self._faculty.list_active_in_department(mdc_department_id)
            if f.is_active and f.department_id == mdc_department_id
        ]

    # -- course definitions ----------------------------------------------

    def _get_course(self, course_id: str) -> MDCCourse:
        course = self._courses.get_by_id(course_id)
        if not course:
            raise NotFoundError("MDC course not found")
        return course

    def _check_faculty(self, faculty_id: Optional[str], mdc_department_id: str) -> Optional[str]:
        if not faculty_id:
            return None
        faculty = self._faculty.get_by_id(faculty_id)
        if not faculty or not faculty.is_active:
            raise ValidationError("Faculty not found or inactive")
        if faculty.department_id != mdc_department_id:
            raise ValidationError("Faculty must belong to the department offering the MDC")
        return faculty.faculty_id

    def _check_students(self, student_ids: Sequence[str], home_department_id: str) -> None:
        ids = list(dict.fromkeys(student_ids))
        found = [
            s
            for s in self._students.get_by_ids(ids)
            if s.department_id == home_department_id and not s.is_deleted
        ]
        if len(found) != len(ids):
            raise ValidationError("Some students not found or not in the home department")

    @as_result
    def save_course(self, *, current_role: Role, data: MDCCourseInput) -> str:
        """Create the course for (home, mdc, year, semester) or replace its definition."""
        _require_admin(current_role)

        course_name = require_non_empty(data.course_name, "Course name")
        year = require_in_range(data.year, "Year", MDC_MIN_YEAR, MDC_MAX_YEAR)
        semester = require_in_range(data.semester, "Semester", MDC_MIN_SEMESTER, MDC_MAX_SEMESTER)
        if data.home_department_id == data.mdc_department_id:
            raise ValidationError("An MDC cannot be offered by the student's own department")
        student_ids = frozenset(str(s) for s in data.student_ids if s)
        if not student_ids:
            raise ValidationError("At least one student must be selected")
        self._check_students(sorted(student_ids), data.home_department_id)
        faculty_id = self._check_faculty(data.faculty_id, data.mdc_department_id)

        existing = self._courses.find_by_key(
            home_department_id=data.home_department_id,
            mdc_department_id=data.mdc_department_id,
            year=year,
            semester=semester,
        )
        if existing:
            self._courses.update(
                course_id=existing.course_id,
                course_name=course_name,
                student_ids=student_ids,
                faculty_id=faculty_id,
            )
            logger.info("MDC course %s updated (%d students)", existing.course_id, len(student_ids))
            return existing.course_id

        course_id = self._courses.create(
            MDCCourseInput(
                home_department_id=data.home_department_id,
                mdc_department_id=data.mdc_department_id,
                year=year,
                semester=semester,
                course_name=course_name,
                student_ids=student_ids,
                faculty_id=faculty_id,
            )
        )
        logger.info("MDC course %s created (%d students)", course_id, len(student_ids))
        return course_id

    @as_result
    def delete_course(self, *, current_role: Role, course_id: str) -> None:
        _require_admin(current_role)
        if not self._courses.delete(course_id):
            raise NotFoundError("MDC course not found")

    @as_result
    def assign_faculty(self, *, current_role: Role, course_id: str, faculty_id: Optional[str]) -> None:
        _require_admin(current_role)
        course = self._get_course(course_id)
        faculty_id = self._check_faculty(faculty_id, course.mdc_department_id)
        # MySQL reports 0 affected rows when nothing changed; existence was checked above.
        self._courses.set_faculty(course_id=course_id, faculty_id=faculty_id)

    @as_result
    def list_courses(self, home_department_id: str, mdc_department_id: str) -> list[MDCCourse]:
        return list(
            self._courses.list_for_pair(
                home_department_id=home_department_id,
                mdc_department_id=mdc_department_id,
            )
        )

    # -- roster ----------------------------------------------------------

    @as_result
    def enroll_student(self, *, current_role: Role, course_id: str, student_id: str) -> frozenset:
        _require_admin(current_role)
        course = self._get_course(course_id)

        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        if student.is_deleted:
            raise DeletedError("Cannot enroll deleted student")
        if student.department_id != course.home_department_id:
            raise ValidationError("Student does not belong to the course's home department")

        ids = self._courses.add_student(course_id=course_id, student_id=student.student_id)
        if ids is None:
            raise NotFoundError("MDC course not found")
        return ids

    @as_result
    def unenroll_student(self, *, current_role: Role, course_id: str, student_id: str) -> frozenset:
        _require_admin(current_role)
        ids = self._courses.remove_student(course_id=course_id, student_id=student_id)
        if ids is None:
            raise NotFoundError("MDC course not found")
        return ids

    @as_result
    def enrollments_for_student(self, home_department_id: str, student_id: str) -> list[MDCCourse]:
        return [c for c in self._courses.list_for_home(home_department_id) if c.has_student(student_id)]

    # -- faculty side ----------------------------------------------------

    def _faculty_for(self, caller: Optional[Caller]) -> Faculty:
        caller = require_role(caller, Role.FACULTY)
        faculty = self._faculty.get_by_user_id(caller.user_id)
        if not faculty:
            raise NotFoundError("Faculty profile not found")
        return faculty

    def _assigned_course(self, caller: Optional[Caller], course_id: str) -> tuple[Faculty, MDCCourse]:
        faculty = self._faculty_for(caller)
        course = self._get_course(course_id)
        if course.faculty_id != faculty.faculty_id:
            raise AuthorizationError("You are not assigned to this MDC course")
        return faculty, course

    @as_result
    def courses_for_faculty(self, caller: Optional[Caller]) -> list[MDCCourse]:
        faculty = self._faculty_for(caller)
        return list(self._courses.list_for_faculty(faculty.faculty_id))

    @as_result
    def roster(self, caller: Optional[Caller], course_id: str) -> list[RosterEntry]:
        _, course = self._assigned_course(caller, course_id)
        students = self._students.get_by_ids(sorted(course.student_ids))
        return [
            RosterEntry(student_id=s.student_id, enrollment_no=s.enrollment_no, name=s.name)
            for s in sorted(students, key=lambda s: s.name)
        ]

    @as_result
    def submit_attendance(
        self,
        caller: Optional[Caller],
        course_id: str,
        on_date: Any,
        period: int,
        records: Sequence[Any],
        *,
        today: Optional[date] = None,
    ) -> SubmitResult:
        faculty, course = self._assigned_course(caller, course_id)

        period = require_in_range(period, "Period", 1, PERIODS_PER_DAY)
        marks = _parse_marks(records)
        if not marks:
            raise ValidationError("No attendance records provided")

        on_date = coerce_date(on_date)
        today = today or now_local().date()
        if on_date > today:
            raise FutureDateError("Cannot mark attendance for a future date")

        outsiders = [m.student_id for m in marks if not course.has_student(m.student_id)]
        if outsiders:
            raise ValidationError("Some students are not enrolled in this MDC course")

        self._courses.upsert_attendance(
            course_id=course_id,
            on_date=on_date,
            period=period,
            marks=marks,
            marked_by=faculty.faculty_id,
        )
        logger.info("MDC attendance saved: course=%s date=%s period=%d records=%d", course_id, on_date, period, len(marks))
        return SubmitResult(count=len(marks), date=on_date)

    @as_result
    def existing_attendance(self, caller: Optional[Caller], course_id: str, on_date: Any, period: int) -> dict[str, AttendanceStatus]:
        self._assigned_course(caller, course_id)
        on_date = coerce_date(on_date)
        period = require_in_range(period, "Period", 1, PERIODS_PER_DAY)
        return {m.student_id: m.status for m in self._courses.list_attendance(course_id=course_id, on_date=on_date, period=period)}
