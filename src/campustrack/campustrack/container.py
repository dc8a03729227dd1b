from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .mdc.mysql_mdc_repository import MySQLMDCCourseRepository
from .mdc.service import MDCEnrollmentService
from .notifications.dispatcher import NotificationDispatcher
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .reports.calculator.rounded_calculator import RoundedPercentageCalculator
from .reports.service import AttendanceReportService
from .students.mysql_semester_repository import MySQLSemesterRepository
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import SemesterTransitionService
from .subjects.mysql_subject_repository import MySQLFacultyRepository, MySQLSubjectRepository
from .timetable.mysql_timetable_repository import MySQLTimetableRepository
from .timetable.service import TimetableService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    subjects_repo: MySQLSubjectRepository
    faculty_repo: MySQLFacultyRepository
    students_repo: MySQLStudentRepository
    semesters_repo: MySQLSemesterRepository
    attendance_repo: MySQLAttendanceRepository
    mdc_repo: MySQLMDCCourseRepository
    timetable_repo: MySQLTimetableRepository
    notifications_repo: MySQLNotificationRepository

    notifier: NotificationDispatcher
    attendance_service: AttendanceService
    report_service: AttendanceReportService
    semester_service: SemesterTransitionService
    mdc_service: MDCEnrollmentService
    timetable_service: TimetableService


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    subjects_repo = MySQLSubjectRepository(conn)
    faculty_repo = MySQLFacultyRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    semesters_repo = MySQLSemesterRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    mdc_repo = MySQLMDCCourseRepository(conn)
    timetable_repo = MySQLTimetableRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)

    notifier = NotificationDispatcher(notifications_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        subjects_repo,
        students_repo,
        faculty_repo,
        timetable_repo,
        notifier=notifier,
    )
    report_service = AttendanceReportService(
        attendance_repo,
        mdc=mdc_repo,
        calculator=RoundedPercentageCalculator(),
    )
    semester_service = SemesterTransitionService(students_repo, semesters_repo, notifier=notifier)
    mdc_service = MDCEnrollmentService(mdc_repo, subjects_repo, faculty_repo, students_repo)
    timetable_service = TimetableService(timetable_repo, subjects_repo, faculty_repo, students_repo)

    return Container(
        conn=conn,
        subjects_repo=subjects_repo,
        faculty_repo=faculty_repo,
        students_repo=students_repo,
        semesters_repo=semesters_repo,
        attendance_repo=attendance_repo,
        mdc_repo=mdc_repo,
        timetable_repo=timetable_repo,
        notifications_repo=notifications_repo,
        notifier=notifier,
        attendance_service=attendance_service,
        report_service=report_service,
        semester_service=semester_service,
        mdc_service=mdc_service,
        timetable_service=timetable_service,
    )
