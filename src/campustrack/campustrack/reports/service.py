from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import coerce_date, now_local
from ..core.constants import MAX_ATTENDANCE_RANGE_DAYS, PERIODS_PER_DAY
from ..core.enums import AttendanceStatus, BlockStatus
from ..core.exceptions import ValidationError
from ..core.result import as_result
from ..mdc.repository import MDCCourseRepository
from .calculator.base import PercentageCalculator
from .calculator.rounded_calculator import RoundedPercentageCalculator
from .model import (
    AttendanceStats,
    CalendarBuckets,
    DailyBlock,
    DayAttendance,
    PeriodMark,
    SemesterSummary,
    SubjectStats,
)


class AttendanceReportService:
    """Read-only aggregation over raw attendance records.

    Everything is recomputed per call; there are no cached statistics. Several
    queries may be issued without a shared snapshot, so a concurrent write can
    show up in one view and not yet in another.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        mdc: Optional[MDCCourseRepository] = None,
        calculator: Optional[PercentageCalculator] = None,
    ):
        self._attendance = attendance
        self._mdc = mdc
        self._calculator = calculator or RoundedPercentageCalculator()

    def _stats(self, records: Sequence[AttendanceRecord]) -> AttendanceStats:
        total = len(records)
        present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
        return AttendanceStats(
            total=total,
            present=present,
            absent=total - present,
            percentage=self._calculator.percentage(present, total),
        )

    def _buckets(self, records: Sequence[AttendanceRecord]) -> CalendarBuckets:
        # Records arrive ordered by (date, period); the last one read for a date wins.
        by_date = {}
        for r in records:
            by_date[r.date] = r.status
        return CalendarBuckets(
            present_dates=frozenset(d for d, s in by_date.items() if s == AttendanceStatus.PRESENT),
            absent_dates=frozenset(d for d, s in by_date.items() if s != AttendanceStatus.PRESENT),
        )

    def _by_subject(self, records: Sequence[AttendanceRecord]) -> list[SubjectStats]:
        grouped: dict[str, dict] = {}
        for r in records:
            g = grouped.get(r.subject_id)
            if not g:
                g = {"present": 0, "total": 0, "name": r.subject_name}
                grouped[r.subject_id] = g
            g["total"] += 1
            if r.status == AttendanceStatus.PRESENT:
                g["present"] += 1

        return [
            SubjectStats(
                subject_id=subject_id,
                present=g["present"],
                total=g["total"],
                percentage=self._calculator.percentage(g["present"], g["total"]),
                subject_name=g["name"],
            )
            for subject_id, g in grouped.items()
        ]

    @as_result
    def stats_for_student_subject(self, student_id: str, subject_id: str) -> AttendanceStats:
        return self._stats(self._attendance.list_for_student(student_id=student_id, subject_id=subject_id))

    @as_result
    def calendar_buckets(self, student_id: str, semester_id: str) -> CalendarBuckets:
        return self._buckets(self._attendance.list_for_student(student_id=student_id, semester_id=semester_id))

    @as_result
    def grouped_stats_by_subject(self, student_id: str, semester_id: str) -> list[SubjectStats]:
        return self._by_subject(self._attendance.list_for_student(student_id=student_id, semester_id=semester_id))

    @as_result
    def semester_summary(self, student_id: str, semester_id: str) -> SemesterSummary:
        records = self._attendance.list_for_student(student_id=student_id, semester_id=semester_id)
        return SemesterSummary(
            overall=self._stats(records),
            subjects=self._by_subject(records),
            calendar=self._buckets(records),
        )

    @as_result
    def daily_status(self, student_id: str, on_date: Any = None) -> list[DailyBlock]:
        """Exactly one block per period for ``on_date`` (default today).

        Regular and MDC marks share the period grid; when both exist for one
        period the MDC mark is shown.
        """
        on_date = coerce_date(on_date) if on_date is not None else now_local().date()

        marked: dict[int, DailyBlock] = {}
        for r in self._attendance.list_for_student_date(student_id=student_id, on_date=on_date):
            marked[r.period] = DailyBlock(r.period, BlockStatus(r.status.value), r.marked_by_name)
        if self._mdc is not None:
            for m in self._mdc.list_attendance_for_student_date(student_id=student_id, on_date=on_date):
                marked[m.period] = DailyBlock(m.period, BlockStatus(m.status.value), m.marked_by_name)

        return [
            marked.get(period) or DailyBlock(period=period, status=BlockStatus.NOT_MARKED)
            for period in range(1, PERIODS_PER_DAY + 1)
        ]

    @as_result
    def attendance_range(self, student_id: str, start: Any, end: Any) -> list[DayAttendance]:
        """Regular marks grouped by date; dates without marks are omitted."""
        start = coerce_date(start, "Start date")
        end = coerce_date(end, "End date")
        if end < start:
            raise ValidationError("End date must not be before start date")
        if (end - start).days + 1 > MAX_ATTENDANCE_RANGE_DAYS:
            raise ValidationError(f"Date range cannot exceed {MAX_ATTENDANCE_RANGE_DAYS} days")

        days: dict[date, DayAttendance] = {}
        for r in self._attendance.list_for_student_range(student_id=student_id, start=start, end=end):
            day = days.get(r.date)
            if day is None:
                day = DayAttendance(date=r.date)
                days[r.date] = day
            day.periods.append(
                PeriodMark(period=r.period, status=r.status, subject_id=r.subject_id, subject_name=r.subject_name)
            )
        return list(days.values())
