from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .semester_model import Semester
from .semester_repository import SemesterRepository


class MySQLSemesterRepository(SemesterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, semester_id: str) -> Optional[Semester]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.semester_id, s.number, s.name, s.is_odd, ay.year AS academic_year
                FROM semesters s
                JOIN academic_years ay ON ay.academic_year_id = s.academic_year_id
                WHERE s.semester_id=%s
                """,
                (semester_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Semester(
                semester_id=str(r["semester_id"]),
                number=int(r["number"]),
                name=r["name"],
                academic_year=int(r["academic_year"]),
                is_odd=bool(r.get("is_odd", True)),
            )
