from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import TimetableEntry, TimetableEntryInput
from .repository import TimetableRepository

_SELECT_ENTRY = """
    SELECT t.entry_id, t.day_of_week, t.period, t.subject_id, t.faculty_id,
           t.department_id, t.semester_id, t.room,
           s.name AS subject_name, s.code AS subject_code, u.name AS faculty_name
    FROM timetables t
    JOIN subjects s ON s.subject_id = t.subject_id
    JOIN faculty_profiles f ON f.faculty_id = t.faculty_id
    JOIN users u ON u.user_id = f.user_id
"""


def _entry(r) -> TimetableEntry:
    return TimetableEntry(
        entry_id=str(r["entry_id"]),
        day_of_week=int(r["day_of_week"]),
        period=int(r["period"]),
        subject_id=str(r["subject_id"]),
        faculty_id=str(r["faculty_id"]),
        department_id=str(r["department_id"]),
        semester_id=str(r["semester_id"]),
        room=r.get("room"),
        subject_name=r.get("subject_name"),
        subject_code=r.get("subject_code"),
        faculty_name=r.get("faculty_name"),
    )


def _ensure_mapping(cur, faculty_id: str, subject_id: str) -> None:
    cur.execute(
        "INSERT IGNORE INTO faculty_subjects(faculty_id, subject_id) VALUES(%s,%s)",
        (faculty_id, subject_id),
    )


def _drop_unused_mapping(cur, faculty_id: str, subject_id: str) -> None:
    cur.execute(
        "SELECT COUNT(*) AS n FROM timetables WHERE faculty_id=%s AND subject_id=%s",
        (faculty_id, subject_id),
    )
    r = fetchone(cur)
    if not r or int(r["n"]) == 0:
        cur.execute(
            "DELETE FROM faculty_subjects WHERE faculty_id=%s AND subject_id=%s",
            (faculty_id, subject_id),
        )


class MySQLTimetableRepository(TimetableRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: str) -> Optional[TimetableEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_ENTRY + " WHERE t.entry_id=%s", (entry_id,))
            r = fetchone(cur)
            return _entry(r) if r else None

    def find_slot(
        self, *, day_of_week: int, period: int, department_id: str, semester_id: str
    ) -> Optional[TimetableEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_ENTRY
                + " WHERE t.day_of_week=%s AND t.period=%s AND t.department_id=%s AND t.semester_id=%s",
                (int(day_of_week), int(period), department_id, semester_id),
            )
            r = fetchone(cur)
            return _entry(r) if r else None

    def is_scheduled(self, *, subject_id: str, day_of_week: int, semester_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS ok FROM timetables
                WHERE subject_id=%s AND day_of_week=%s AND semester_id=%s
                LIMIT 1
                """,
                (subject_id, int(day_of_week), semester_id),
            )
            return fetchone(cur) is not None

    def list_for_cohort(
        self, *, department_id: str, semester_id: str, day_of_week: Optional[int] = None
    ) -> Sequence[TimetableEntry]:
        clauses = ["t.department_id=%s", "t.semester_id=%s"]
        params: list[object] = [department_id, semester_id]
        if day_of_week is not None:
            clauses.append("t.day_of_week=%s")
            params.append(int(day_of_week))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_ENTRY + f" WHERE {' AND '.join(clauses)} ORDER BY t.day_of_week ASC, t.period ASC",
                tuple(params),
            )
            return [_entry(r) for r in fetchall(cur)]

    def list_for_faculty(self, faculty_id: str, day_of_week: Optional[int] = None) -> Sequence[TimetableEntry]:
        clauses = ["t.faculty_id=%s"]
        params: list[object] = [faculty_id]
        if day_of_week is not None:
            clauses.append("t.day_of_week=%s")
            params.append(int(day_of_week))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_ENTRY + f" WHERE {' AND '.join(clauses)} ORDER BY t.day_of_week ASC, t.period ASC",
                tuple(params),
            )
            return [_entry(r) for r in fetchall(cur)]

    def create(self, data: TimetableEntryInput) -> str:
        entry_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            # uq_timetable_slot turns a concurrent claim of the same slot into DuplicateError.
            cur.execute(
                """
                INSERT INTO timetables
                    (entry_id, day_of_week, period, subject_id, faculty_id, department_id, semester_id, room)
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry_id,
                    int(data.day_of_week),
                    int(data.period),
                    data.subject_id,
                    data.faculty_id,
                    data.department_id,
                    data.semester_id,
                    data.room,
                ),
            )
            _ensure_mapping(cur, data.faculty_id, data.subject_id)
        return entry_id

    def update(self, *, entry_id: str, data: TimetableEntryInput) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT faculty_id, subject_id FROM timetables WHERE entry_id=%s FOR UPDATE",
                (entry_id,),
            )
            old = fetchone(cur)
            if not old:
                return False

            cur.execute(
                """
                UPDATE timetables
                SET day_of_week=%s, period=%s, subject_id=%s, faculty_id=%s,
                    department_id=%s, semester_id=%s, room=%s
                WHERE entry_id=%s
                """,
                (
                    int(data.day_of_week),
                    int(data.period),
                    data.subject_id,
                    data.faculty_id,
                    data.department_id,
                    data.semester_id,
                    data.room,
                    entry_id,
                ),
            )
            _ensure_mapping(cur, data.faculty_id, data.subject_id)
            old_pair = (str(old["faculty_id"]), str(old["subject_id"]))
            if old_pair != (data.faculty_id, data.subject_id):
                _drop_unused_mapping(cur, *old_pair)
        return True

    def delete(self, entry_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT faculty_id, subject_id FROM timetables WHERE entry_id=%s FOR UPDATE",
                (entry_id,),
            )
            old = fetchone(cur)
            if not old:
                return False
            cur.execute("DELETE FROM timetables WHERE entry_id=%s", (entry_id,))
            _drop_unused_mapping(cur, str(old["faculty_id"]), str(old["subject_id"]))
        return True
