from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Faculty, Subject
from .repository import FacultyRepository, SubjectRepository


def _subject(r) -> Subject:
    return Subject(
        subject_id=str(r["subject_id"]),
        code=r["code"],
        name=r["name"],
        department_id=str(r["department_id"]),
        semester_id=str(r["semester_id"]),
        is_mdc=bool(r.get("is_mdc", False)),
    )


def _faculty(r) -> Faculty:
    return Faculty(
        faculty_id=str(r["faculty_id"]),
        user_id=str(r["user_id"]),
        name=r["name"],
        employee_id=r["employee_id"],
        department_id=str(r["department_id"]),
        is_active=bool(r.get("is_active", True)) and r.get("deleted_at") is None,
    )


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, subject_id: str) -> Optional[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT subject_id, code, name, department_id, semester_id, is_mdc
                FROM subjects
                WHERE subject_id=%s
                """,
                (subject_id,),
            )
            r = fetchone(cur)
            return _subject(r) if r else None

    def is_assigned(self, faculty_id: str, subject_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM faculty_subjects WHERE faculty_id=%s AND subject_id=%s",
                (faculty_id, subject_id),
            )
            return fetchone(cur) is not None

    def list_mdc_subjects(self, *, department_id: str, exclude_department_id: str) -> Sequence[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.subject_id, s.code, s.name, s.department_id, s.semester_id, s.is_mdc
                FROM subjects s
                JOIN semesters sem ON sem.semester_id = s.semester_id
                JOIN academic_years ay ON ay.academic_year_id = sem.academic_year_id
                WHERE s.is_mdc=1 AND s.department_id=%s AND s.department_id<>%s
                ORDER BY ay.year ASC, sem.number ASC, s.name ASC
                """,
                (department_id, exclude_department_id),
            )
            return [_subject(r) for r in fetchall(cur)]


class MySQLFacultyRepository(FacultyRepository):
    _SELECT = """
        SELECT f.faculty_id, f.user_id, u.name, f.employee_id, f.department_id,
               u.is_active, u.deleted_at
        FROM faculty_profiles f
        JOIN users u ON u.user_id = f.user_id
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, faculty_id: str) -> Optional[Faculty]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(self._SELECT + " WHERE f.faculty_id=%s", (faculty_id,))
            r = fetchone(cur)
            return _faculty(r) if r else None

    def get_by_user_id(self, user_id: str) -> Optional[Faculty]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(self._SELECT + " WHERE f.user_id=%s", (user_id,))
            r = fetchone(cur)
            return _faculty(r) if r else None

    def list_active_in_department(self, department_id: str) -> Sequence[Faculty]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                self._SELECT
                + " WHERE f.department_id=%s AND u.is_active=1 AND u.deleted_at IS NULL ORDER BY u.name ASC",
                (department_id,),
            )
            return [_faculty(r) for r in fetchall(cur)]
