from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from src.campustrack.campustrack.attendance.model import AttendanceRecord
from src.campustrack.campustrack.core.enums import AttendanceStatus, BlockStatus, ErrorKind
from src.campustrack.campustrack.mdc.model import MDCStudentMark
from src.campustrack.campustrack.reports import service as report_service
from src.campustrack.campustrack.reports.calculator.rounded_calculator import RoundedPercentageCalculator
from src.campustrack.campustrack.reports.service import AttendanceReportService

P = AttendanceStatus.PRESENT
A = AttendanceStatus.ABSENT


class FakeAttendanceRepo:
    def __init__(self, rows):
        self._rows = rows
        self.last_args = None

    def list_for_student(self, *, student_id, semester_id=None, subject_id=None):
        self.last_args = {"student_id": student_id, "semester_id": semester_id, "subject_id": subject_id}
        rows = [
            r
            for r in self._rows
            if r.student_id == student_id
            and (semester_id is None or r.semester_id == semester_id)
            and (subject_id is None or r.subject_id == subject_id)
        ]
        return sorted(rows, key=lambda r: (r.date, r.period))

    def list_for_student_date(self, *, student_id, on_date):
        rows = [r for r in self._rows if r.student_id == student_id and r.date == on_date]
        return sorted(rows, key=lambda r: r.period)

    def list_for_student_range(self, *, student_id, start, end):
        self.last_args = {"student_id": student_id, "start": start, "end": end}
        rows = [r for r in self._rows if r.student_id == student_id and start <= r.date <= end]
        return sorted(rows, key=lambda r: (r.date, r.period))


class FakeMDCRepo:
    def __init__(self, marks):
        self._marks = marks

    def list_attendance_for_student_date(self, *, student_id, on_date):
        return sorted((m for s, d, m in self._marks if (s, d) == (student_id, on_date)), key=lambda m: m.period)


def _rec(day, period, status, subject_id="math", semester_id="sem-1", student_id="s1", name=None):
    return AttendanceRecord(
        student_id=student_id,
        subject_id=subject_id,
        date=date(2026, 2, day),
        period=period,
        status=status,
        semester_id=semester_id,
        marked_by="fac-1",
        subject_name=name,
    )


def test_subject_stats_seven_of_ten_is_seventy_percent():
    rows = [_rec(d, 1, P) for d in range(2, 9)] + [_rec(d, 1, A) for d in range(9, 12)]
    svc = AttendanceReportService(FakeAttendanceRepo(rows))

    stats = svc.stats_for_student_subject("s1", "math").data

    assert (stats.total, stats.present, stats.absent, stats.percentage) == (10, 7, 3, 70)


def test_no_records_gives_zero_percent():
    svc = AttendanceReportService(FakeAttendanceRepo([]))

    stats = svc.stats_for_student_subject("s1", "math").data

    assert (stats.total, stats.present, stats.percentage) == (0, 0, 0)


@pytest.mark.parametrize(
    "present,total,expected",
    [(1, 3, 33), (2, 3, 67), (1, 8, 13), (5, 8, 63), (0, 4, 0), (4, 4, 100), (0, 0, 0)],
)
def test_percentage_rounds_half_up(present, total, expected):
    assert RoundedPercentageCalculator().percentage(present, total) == expected


def test_grouped_stats_only_lists_subjects_with_records():
    rows = [
        _rec(2, 1, P, subject_id="math", name="Maths"),
        _rec(2, 2, A, subject_id="phys", name="Physics"),
        _rec(3, 1, P, subject_id="math", name="Maths"),
        _rec(3, 3, P, subject_id="chem", semester_id="sem-2"),
    ]
    svc = AttendanceReportService(FakeAttendanceRepo(rows))

    grouped = svc.grouped_stats_by_subject("s1", "sem-1").data

    assert [(g.subject_id, g.present, g.total, g.percentage) for g in grouped] == [
        ("math", 2, 2, 100),
        ("phys", 0, 1, 0),
    ]
    assert grouped[0].subject_name == "Maths"


def test_calendar_buckets_last_record_of_the_day_wins():
    rows = [
        _rec(2, 1, P),
        _rec(2, 2, A),
        _rec(3, 1, A),
        _rec(3, 4, P),
        _rec(4, 1, P),
    ]
    svc = AttendanceReportService(FakeAttendanceRepo(rows))

    buckets = svc.calendar_buckets("s1", "sem-1").data

    assert buckets.present_dates == {date(2026, 2, 3), date(2026, 2, 4)}
    assert buckets.absent_dates == {date(2026, 2, 2)}
    assert not buckets.present_dates & buckets.absent_dates


def test_semester_summary_combines_views_for_one_semester():
    rows = [
        _rec(2, 1, P, subject_id="math"),
        _rec(2, 2, A, subject_id="phys"),
        _rec(5, 1, P, subject_id="math", semester_id="sem-0"),
    ]
    repo = FakeAttendanceRepo(rows)
    svc = AttendanceReportService(repo)

    summary = svc.semester_summary("s1", "sem-1").data

    assert repo.last_args == {"student_id": "s1", "semester_id": "sem-1", "subject_id": None}
    assert (summary.overall.total, summary.overall.present, summary.overall.percentage) == (2, 1, 50)
    assert [s.subject_id for s in summary.subjects] == ["math", "phys"]
    assert summary.calendar.absent_dates == {date(2026, 2, 2)}


def test_daily_status_has_five_blocks_with_unmarked_gaps():
    rows = [
        replace(_rec(4, 1, P), marked_by_name="Priya Nair"),
        replace(_rec(4, 3, A), marked_by_name="Priya Nair"),
        _rec(5, 2, P),
    ]
    svc = AttendanceReportService(FakeAttendanceRepo(rows))

    blocks = svc.daily_status("s1", "2026-02-04").data

    assert [(b.period, b.status, b.faculty_name) for b in blocks] == [
        (1, BlockStatus.PRESENT, "Priya Nair"),
        (2, BlockStatus.NOT_MARKED, None),
        (3, BlockStatus.ABSENT, "Priya Nair"),
        (4, BlockStatus.NOT_MARKED, None),
        (5, BlockStatus.NOT_MARKED, None),
    ]


def test_daily_status_merges_mdc_marks_and_mdc_wins_a_shared_period():
    day = date(2026, 2, 4)
    rows = [replace(_rec(4, 2, P), marked_by_name="Priya Nair")]
    marks = [
        ("s1", day, MDCStudentMark("mdc-1", "Applied Statistics", 4, A, "fac-2", "Rahul Menon")),
        ("s1", day, MDCStudentMark("mdc-1", "Applied Statistics", 2, A, "fac-2", "Rahul Menon")),
        ("s2", day, MDCStudentMark("mdc-1", "Applied Statistics", 5, P, "fac-2", "Rahul Menon")),
    ]
    svc = AttendanceReportService(FakeAttendanceRepo(rows), mdc=FakeMDCRepo(marks))

    blocks = svc.daily_status("s1", day).data

    assert len(blocks) == 5
    assert (blocks[1].status, blocks[1].faculty_name) == (BlockStatus.ABSENT, "Rahul Menon")
    assert (blocks[3].status, blocks[3].faculty_name) == (BlockStatus.ABSENT, "Rahul Menon")
    assert blocks[4].status == BlockStatus.NOT_MARKED


def test_daily_status_defaults_to_today(monkeypatch):
    monkeypatch.setattr(report_service, "now_local", lambda: datetime(2026, 2, 5, 9, 0))
    svc = AttendanceReportService(FakeAttendanceRepo([_rec(5, 2, P)]))

    blocks = svc.daily_status("s1").data

    assert [b.status for b in blocks][:2] == [BlockStatus.NOT_MARKED, BlockStatus.PRESENT]


def test_attendance_range_groups_periods_by_date():
    rows = [
        _rec(3, 2, A, subject_id="phys", name="Physics"),
        _rec(3, 1, P, name="Maths"),
        _rec(6, 4, P, name="Maths"),
        _rec(20, 1, P, name="Maths"),
    ]
    svc = AttendanceReportService(FakeAttendanceRepo(rows))

    days = svc.attendance_range("s1", "2026-02-01", "2026-02-10").data

    assert [d.date for d in days] == [date(2026, 2, 3), date(2026, 2, 6)]
    assert [(p.period, p.subject_name) for p in days[0].periods] == [(1, "Maths"), (2, "Physics")]


def test_attendance_range_is_capped_at_ninety_days():
    repo = FakeAttendanceRepo([])
    svc = AttendanceReportService(repo)

    widest = svc.attendance_range("s1", date(2026, 1, 1), date(2026, 3, 31))
    too_wide = svc.attendance_range("s1", date(2026, 1, 1), date(2026, 4, 1))

    assert widest.success is True
    assert repo.last_args["end"] == date(2026, 3, 31)
    assert too_wide.kind == ErrorKind.VALIDATION
    assert too_wide.message == "Date range cannot exceed 90 days"


def test_attendance_range_rejects_reversed_and_invalid_dates():
    svc = AttendanceReportService(FakeAttendanceRepo([]))

    assert svc.attendance_range("s1", "2026-02-10", "2026-02-01").kind == ErrorKind.VALIDATION
    assert svc.attendance_range("s1", "yesterday", "2026-02-01").kind == ErrorKind.VALIDATION
