from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..core.exceptions import DeletedError, NoChangeError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import HistoryEntry, RosterEntry, Student, default_transition_reason
from .repository import StudentRepository

_SELECT_STUDENT = """
    SELECT sp.student_id, sp.user_id, u.name, sp.enrollment_no, sp.department_id, sp.semester_id,
           sp.admission_year, sp.current_year, u.is_active, u.deleted_at
    FROM student_profiles sp
    JOIN users u ON u.user_id = sp.user_id
"""


def _student(r) -> Student:
    return Student(
        student_id=str(r["student_id"]),
        user_id=str(r["user_id"]),
        name=r["name"],
        enrollment_no=r["enrollment_no"],
        department_id=str(r["department_id"]),
        semester_id=str(r["semester_id"]),
        admission_year=r.get("admission_year"),
        current_year=r.get("current_year"),
        is_active=bool(r.get("is_active", True)),
        deleted_at=r.get("deleted_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_STUDENT + " WHERE sp.student_id=%s", (student_id,))
            r = fetchone(cur)
            return _student(r) if r else None

    def get_by_user_id(self, user_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_STUDENT + " WHERE sp.user_id=%s", (user_id,))
            r = fetchone(cur)
            return _student(r) if r else None

    def get_by_ids(self, student_ids: Sequence[str]) -> Sequence[Student]:
        ids = list(dict.fromkeys(student_ids))
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_STUDENT + f" WHERE sp.student_id IN ({placeholders(len(ids))}) ORDER BY u.name ASC",
                tuple(ids),
            )
            return [_student(r) for r in fetchall(cur)]

    def students_in(self, semester_id: str, department_id: str) -> Sequence[RosterEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sp.student_id, sp.enrollment_no, u.name
                FROM student_profiles sp
                JOIN users u ON u.user_id = sp.user_id
                WHERE sp.semester_id=%s AND sp.department_id=%s
                  AND u.is_active=1 AND u.deleted_at IS NULL
                ORDER BY sp.enrollment_no ASC
                """,
                (semester_id, department_id),
            )
            return [
                RosterEntry(student_id=str(r["student_id"]), enrollment_no=r["enrollment_no"], name=r["name"])
                for r in fetchall(cur)
            ]

    def apply_semester_transition(
        self,
        *,
        student_id: str,
        new_semester_id: str,
        new_semester_name: str,
        current_year: int,
        changed_by: str,
        reason: Optional[str] = None,
    ) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sp.semester_id, s.name AS semester_name, u.deleted_at
                FROM student_profiles sp
                JOIN users u ON u.user_id = sp.user_id
                LEFT JOIN semesters s ON s.semester_id = sp.semester_id
                WHERE sp.student_id=%s
                FOR UPDATE
                """,
                (student_id,),
            )
            current = fetchone(cur)
            if not current:
                raise NotFoundError("Student not found")
            if current.get("deleted_at") is not None:
                raise DeletedError("Cannot update deleted student")
            if str(current["semester_id"]) == new_semester_id:
                raise NoChangeError("Student is already in this semester")

            old_name = current.get("semester_name")
            reason = (reason or "").strip() or default_transition_reason(old_name, new_semester_name)
            cur.execute(
                """
                UPDATE student_profiles
                SET semester_id=%s, current_year=%s, updated_at=CURRENT_TIMESTAMP
                WHERE student_id=%s
                """,
                (new_semester_id, int(current_year), student_id),
            )
            cur.execute(
                """
                INSERT INTO student_semester_history(history_id, student_id, semester_id, changed_by, reason)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (str(uuid.uuid4()), student_id, new_semester_id, changed_by, reason),
            )
        return old_name or "Unknown"

    def list_history(self, student_id: str) -> Sequence[HistoryEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT h.semester_id, s.name AS semester_name, h.changed_at, u.name AS changed_by, h.reason
                FROM student_semester_history h
                JOIN semesters s ON s.semester_id = h.semester_id
                JOIN users u ON u.user_id = h.changed_by
                WHERE h.student_id=%s
                ORDER BY h.changed_at DESC, h.seq DESC
                """,
                (student_id,),
            )
            return [
                HistoryEntry(
                    semester_id=str(r["semester_id"]),
                    semester_name=r["semester_name"],
                    changed_at=r["changed_at"],
                    changed_by=r["changed_by"],
                    reason=r.get("reason"),
                )
                for r in fetchall(cur)
            ]
