"""Period timings and the attendance marking window.

Two fixed tables: Friday (the short day) and every other teaching day.
Days are ISO weekdays (1=Monday ... 7=Sunday); Sunday has no classes.
All functions are pure; callers pass local wall-clock values.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Union

from ..common.datetime_utils import minutes_of_day
from ..core.constants import MARKING_WINDOW_MINUTES, PERIODS_PER_DAY, REST_DAY, SHORT_DAY
from ..core.enums import DayType
from .model import MarkingVerdict, PeriodWindow

WEEKDAY_TIMINGS: dict[int, PeriodWindow] = {
    1: PeriodWindow.of(9, 20, 10, 20),
    2: PeriodWindow.of(10, 20, 11, 20),
    3: PeriodWindow.of(11, 30, 12, 20),
    4: PeriodWindow.of(13, 30, 14, 20),
    5: PeriodWindow.of(14, 20, 15, 20),
}

SHORT_DAY_TIMINGS: dict[int, PeriodWindow] = {
    1: PeriodWindow.of(9, 20, 10, 20),
    2: PeriodWindow.of(10, 20, 11, 10),
    3: PeriodWindow.of(11, 20, 12, 10),
    4: PeriodWindow.of(13, 50, 14, 20),
    5: PeriodWindow.of(14, 20, 15, 20),
}

Clock = Union[datetime, time]


def day_type(day_of_week: int) -> Optional[DayType]:
    if day_of_week == SHORT_DAY:
        return DayType.SHORT_DAY
    if day_of_week == REST_DAY:
        return DayType.REST_DAY
    if 1 <= day_of_week <= 6:
        return DayType.WEEKDAY
    return None


def day_of(value: date) -> int:
    """ISO weekday of a local date."""
    return value.isoweekday()


def window_for(day_of_week: int, period: int) -> Optional[PeriodWindow]:
    kind = day_type(day_of_week)
    if kind is None or kind == DayType.REST_DAY:
        return None
    table = SHORT_DAY_TIMINGS if kind == DayType.SHORT_DAY else WEEKDAY_TIMINGS
    return table.get(period)


def is_markable(day_of_week: int, period: int, now: Clock) -> MarkingVerdict:
    """Marking opens 15 minutes before the period and closes 15 minutes after it."""
    window = window_for(day_of_week, period)
    if not window:
        return MarkingVerdict(allowed=False, reason="Invalid period")

    current = minutes_of_day(now)
    opens_at = window.start - MARKING_WINDOW_MINUTES
    closes_at = window.end + MARKING_WINDOW_MINUTES

    if current < opens_at:
        hours, mins = divmod(opens_at - current, 60)
        reason = f"Opens in {hours}h {mins}m" if hours > 0 else f"Opens in {mins}m"
        return MarkingVerdict(allowed=False, reason=reason)

    if current > closes_at:
        return MarkingVerdict(allowed=False, reason="Time window closed")

    return MarkingVerdict(allowed=True, reason="Mark now")


def current_period(day_of_week: int, now: Clock) -> int:
    """Period whose window contains ``now``, or 0 between/outside classes."""
    current = minutes_of_day(now)
    for period in range(1, PERIODS_PER_DAY + 1):
        window = window_for(day_of_week, period)
        if window and window.contains(current):
            return period
    return 0


def _format_minutes(total: int) -> str:
    hour, minute = divmod(total, 60)
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = hour - 12 if hour > 12 else (12 if hour == 0 else hour)
    return f"{display_hour}:{minute:02d} {suffix}"


def period_time_display(day_of_week: int, period: int) -> str:
    window = window_for(day_of_week, period)
    if not window:
        return f"Period {period}"
    return f"{_format_minutes(window.start)} – {_format_minutes(window.end)}"


def all_period_times_for_day(day_of_week: int) -> list[str]:
    return [period_time_display(day_of_week, p) for p in range(1, PERIODS_PER_DAY + 1)]
