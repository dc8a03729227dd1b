from __future__ import annotations

from datetime import datetime

import pytest

from src.campustrack.campustrack.attendance import service as attendance_service
from src.campustrack.campustrack.mdc import service as mdc_service


@pytest.fixture
def fixed_now(monkeypatch):
    """Freeze the local clock the services read (Wednesday 2026-03-04 10:30)."""
    now = datetime(2026, 3, 4, 10, 30)
    monkeypatch.setattr(attendance_service, "now_local", lambda: now)
    monkeypatch.setattr(mdc_service, "now_local", lambda: now)
    return now
