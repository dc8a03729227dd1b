from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Semester:
    semester_id: str
    number: int
    name: str
    academic_year: int
    is_odd: bool = True
