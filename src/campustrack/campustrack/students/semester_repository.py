from __future__ import annotations

from typing import Optional, Protocol

from .semester_model import Semester


class SemesterRepository(Protocol):
    def get_by_id(self, semester_id: str) -> Optional[Semester]:
        raise NotImplementedError
