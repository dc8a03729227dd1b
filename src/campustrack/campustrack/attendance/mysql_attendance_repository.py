from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AttendanceEntry, AttendanceRecord
from .repository import AttendanceRepository


def _record(r) -> AttendanceRecord:
    return AttendanceRecord(
        student_id=str(r["student_id"]),
        subject_id=str(r["subject_id"]),
        date=r["attendance_date"],
        period=int(r["period"]),
        status=AttendanceStatus(r["status"]),
        semester_id=str(r["semester_id"]) if r.get("semester_id") else None,
        marked_by=str(r["marked_by"]),
        updated_at=r.get("updated_at"),
        subject_name=r.get("subject_name"),
        marked_by_name=r.get("marked_by_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    _SELECT = """
        SELECT ar.student_id, ar.subject_id, ar.attendance_date, ar.period, ar.status,
               ar.semester_id, ar.marked_by, ar.updated_at, s.name AS subject_name,
               fu.name AS marked_by_name
        FROM attendance_records ar
        JOIN subjects s ON s.subject_id = ar.subject_id
        LEFT JOIN faculty_profiles f ON f.faculty_id = ar.marked_by
        LEFT JOIN users fu ON fu.user_id = f.user_id
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_batch(
        self,
        *,
        subject_id: str,
        on_date: date,
        semester_id: str,
        entries: Sequence[AttendanceEntry],
        marked_by: str,
        updated_at: datetime,
    ) -> int:
        rows = [
            (e.student_id, subject_id, on_date, int(e.period), e.status.value, semester_id, marked_by, updated_at)
            for e in entries
        ]
        with db_cursor(self._conn_factory) as (_, cur):
            # The unique key (student_id, subject_id, attendance_date, period) drives the upsert.
            for row in rows:
                cur.execute(
                    """
                    INSERT INTO attendance_records
                        (student_id, subject_id, attendance_date, period, status, semester_id, marked_by, updated_at)
                    VALUES (%s,%s,%s,%s,%s,%s,%s,%s)
                    ON DUPLICATE KEY UPDATE
                        status=VALUES(status),
                        marked_by=VALUES(marked_by),
                        updated_at=VALUES(updated_at)
                    """,
                    row,
                )
        return len(rows)

    def list_for_subject_date(
        self,
        *,
        subject_id: str,
        on_date: date,
        marked_by: Optional[str] = None,
    ) -> Sequence[AttendanceEntry]:
        clauses = ["subject_id=%s", "attendance_date=%s"]
        params: list[object] = [subject_id, on_date]
        if marked_by is not None:
            clauses.append("marked_by=%s")
            params.append(marked_by)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT student_id, period, status
                FROM attendance_records
                WHERE {" AND ".join(clauses)}
                ORDER BY period ASC, student_id ASC
                """,
                tuple(params),
            )
            return [
                AttendanceEntry(
                    student_id=str(r["student_id"]),
                    period=int(r["period"]),
                    status=AttendanceStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

    def list_for_student(
        self,
        *,
        student_id: str,
        semester_id: Optional[str] = None,
        subject_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["ar.student_id=%s"]
        params: list[object] = [student_id]
        if semester_id is not None:
            clauses.append("ar.semester_id=%s")
            params.append(semester_id)
        if subject_id is not None:
            clauses.append("ar.subject_id=%s")
            params.append(subject_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                self._SELECT + f" WHERE {' AND '.join(clauses)} ORDER BY ar.attendance_date ASC, ar.period ASC",
                tuple(params),
            )
            return [_record(r) for r in fetchall(cur)]

    def list_for_student_date(self, *, student_id: str, on_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                self._SELECT + " WHERE ar.student_id=%s AND ar.attendance_date=%s ORDER BY ar.period ASC",
                (student_id, on_date),
            )
            return [_record(r) for r in fetchall(cur)]

    def list_for_student_range(self, *, student_id: str, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                self._SELECT
                + """
                WHERE ar.student_id=%s AND ar.attendance_date BETWEEN %s AND %s
                ORDER BY ar.attendance_date ASC, ar.period ASC
                """,
                (student_id, start, end),
            )
            return [_record(r) for r in fetchall(cur)]
