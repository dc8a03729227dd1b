from __future__ import annotations

import uuid
from datetime import date
from typing import FrozenSet, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_id_set, fetchall, fetchone, load_id_set
from .model import MDCCourse, MDCCourseInput, MDCMark, MDCStudentMark
from .repository import MDCCourseRepository

_SELECT_COURSE = """
    SELECT course_id, course_name, home_department_id, mdc_department_id, year, semester, student_ids, faculty_id
    FROM mdc_courses
"""


def _course(r) -> MDCCourse:
    return MDCCourse(
        course_id=str(r["course_id"]),
        course_name=r["course_name"],
        home_department_id=str(r["home_department_id"]),
        mdc_department_id=str(r["mdc_department_id"]),
        year=int(r["year"]),
        semester=int(r["semester"]),
        student_ids=load_id_set(r.get("student_ids")),
        faculty_id=str(r["faculty_id"]) if r.get("faculty_id") else None,
    )


class MySQLMDCCourseRepository(MDCCourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, course_id: str) -> Optional[MDCCourse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_COURSE + " WHERE course_id=%s", (course_id,))
            r = fetchone(cur)
            return _course(r) if r else None

    def find_by_key(
        self, *, home_department_id: str, mdc_department_id: str, year: int, semester: int
    ) -> Optional[MDCCourse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_COURSE
                + " WHERE home_department_id=%s AND mdc_department_id=%s AND year=%s AND semester=%s",
                (home_department_id, mdc_department_id, int(year), int(semester)),
            )
            r = fetchone(cur)
            return _course(r) if r else None

    def list_for_pair(self, *, home_department_id: str, mdc_department_id: str) -> Sequence[MDCCourse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_COURSE
                + " WHERE home_department_id=%s AND mdc_department_id=%s ORDER BY year ASC, semester ASC",
                (home_department_id, mdc_department_id),
            )
            return [_course(r) for r in fetchall(cur)]

    def list_for_home(self, home_department_id: str) -> Sequence[MDCCourse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_COURSE + " WHERE home_department_id=%s ORDER BY year ASC, semester ASC",
                (home_department_id,),
            )
            return [_course(r) for r in fetchall(cur)]

    def list_for_faculty(self, faculty_id: str) -> Sequence[MDCCourse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_COURSE + " WHERE faculty_id=%s ORDER BY year ASC, semester ASC", (faculty_id,))
            return [_course(r) for r in fetchall(cur)]

    def create(self, data: MDCCourseInput) -> str:
        course_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO mdc_courses
                    (course_id, course_name, home_department_id, mdc_department_id, year, semester, student_ids, faculty_id)
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    course_id,
                    data.course_name,
                    data.home_department_id,
                    data.mdc_department_id,
                    int(data.year),
                    int(data.semester),
                    dump_id_set(data.student_ids),
                    data.faculty_id,
                ),
            )
        return course_id

    def update(self, *, course_id: str, course_name: str, student_ids: FrozenSet[str], faculty_id: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE mdc_courses
                SET course_name=%s, student_ids=%s, faculty_id=%s, updated_at=CURRENT_TIMESTAMP
                WHERE course_id=%s
                """,
                (course_name, dump_id_set(student_ids), faculty_id, course_id),
            )
            return cur.rowcount > 0

    def delete(self, course_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM mdc_courses WHERE course_id=%s", (course_id,))
            return cur.rowcount > 0

    def set_faculty(self, *, course_id: str, faculty_id: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE mdc_courses SET faculty_id=%s, updated_at=CURRENT_TIMESTAMP WHERE course_id=%s",
                (faculty_id, course_id),
            )
            return cur.rowcount > 0

    def _mutate_roster(self, course_id: str, change) -> Optional[FrozenSet[str]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT student_ids FROM mdc_courses WHERE course_id=%s FOR UPDATE", (course_id,))
            r = fetchone(cur)
            if not r:
                return None
            current = load_id_set(r.get("student_ids"))
            updated = frozenset(change(set(current)))
            if updated != current:
                cur.execute(
                    "UPDATE mdc_courses SET student_ids=%s, updated_at=CURRENT_TIMESTAMP WHERE course_id=%s",
                    (dump_id_set(updated), course_id),
                )
            return updated

    def add_student(self, *, course_id: str, student_id: str) -> Optional[FrozenSet[str]]:
        return self._mutate_roster(course_id, lambda ids: ids | {student_id})

    def remove_student(self, *, course_id: str, student_id: str) -> Optional[FrozenSet[str]]:
        return self._mutate_roster(course_id, lambda ids: ids - {student_id})

    def upsert_attendance(
        self,
        *,
        course_id: str,
        on_date: date,
        period: int,
        marks: Sequence[MDCMark],
        marked_by: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            for m in marks:
                cur.execute(
                    """
                    INSERT INTO mdc_attendance_records
                        (course_id, student_id, attendance_date, period, status, marked_by)
                    VALUES (%s,%s,%s,%s,%s,%s)
                    ON DUPLICATE KEY UPDATE status=VALUES(status), marked_by=VALUES(marked_by)
                    """,
                    (course_id, m.student_id, on_date, int(period), m.status.value, marked_by),
                )
        return len(marks)

    def list_attendance(self, *, course_id: str, on_date: date, period: int) -> Sequence[MDCMark]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, status
                FROM mdc_attendance_records
                WHERE course_id=%s AND attendance_date=%s AND period=%s
                ORDER BY student_id ASC
                """,
                (course_id, on_date, int(period)),
            )
            return [MDCMark(student_id=str(r["student_id"]), status=AttendanceStatus(r["status"])) for r in fetchall(cur)]

    def list_attendance_for_student_date(self, *, student_id: str, on_date: date) -> Sequence[MDCStudentMark]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT r.course_id, c.course_name, r.period, r.status, r.marked_by, u.name AS marked_by_name
                FROM mdc_attendance_records r
                JOIN mdc_courses c ON c.course_id = r.course_id
                LEFT JOIN faculty_profiles f ON f.faculty_id = r.marked_by
                LEFT JOIN users u ON u.user_id = f.user_id
                WHERE r.student_id=%s AND r.attendance_date=%s
                ORDER BY r.period ASC
                """,
                (student_id, on_date),
            )
            return [
                MDCStudentMark(
                    course_id=str(r["course_id"]),
                    course_name=r["course_name"],
                    period=int(r["period"]),
                    status=AttendanceStatus(r["status"]),
                    marked_by=str(r["marked_by"]),
                    marked_by_name=r.get("marked_by_name"),
                )
                for r in fetchall(cur)
            ]
