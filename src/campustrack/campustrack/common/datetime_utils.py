from __future__ import annotations

from datetime import date, datetime

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def coerce_date(value, field_name: str = "Date") -> date:
    """Accept a date (or datetime) or an ISO string; raise ValidationError otherwise."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return parse_iso_date(value.strip())
        except ValueError:
            raise ValidationError(f"Invalid {field_name.lower()}: {value!r}")
    raise ValidationError(f"Invalid {field_name.lower()}")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def minutes_of_day(value) -> int:
    """Minutes since midnight for a datetime or time, seconds ignored."""
    return value.hour * 60 + value.minute
