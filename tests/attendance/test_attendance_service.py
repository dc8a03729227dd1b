from __future__ import annotations

from datetime import date

from src.campustrack.campustrack.attendance.model import AttendanceEntry, AttendanceRecord
from src.campustrack.campustrack.attendance.service import AttendanceService
from src.campustrack.campustrack.common.session import Caller
from src.campustrack.campustrack.core.enums import AttendanceStatus, ErrorKind, NotificationType, Role
from src.campustrack.campustrack.notifications.dispatcher import NotificationDispatcher
from src.campustrack.campustrack.students.model import Student
from src.campustrack.campustrack.subjects.model import Faculty, Subject

TODAY = date(2026, 3, 4)  # Wednesday
SUNDAY = date(2026, 3, 1)


class FakeAttendanceRepo:
    def __init__(self):
        self.rows: dict[tuple, AttendanceRecord] = {}
        self.upsert_calls = 0

    def upsert_batch(self, *, subject_id, on_date, semester_id, entries, marked_by, updated_at):
        self.upsert_calls += 1
        for e in entries:
            key = (e.student_id, subject_id, on_date, e.period)
            existing = self.rows.get(key)
            self.rows[key] = AttendanceRecord(
                student_id=e.student_id,
                subject_id=subject_id,
                date=on_date,
                period=e.period,
                status=e.status,
                semester_id=existing.semester_id if existing else semester_id,
                marked_by=marked_by,
                updated_at=updated_at,
            )
        return len(entries)

    def list_for_subject_date(self, *, subject_id, on_date, marked_by=None):
        rows = [
            r
            for r in self.rows.values()
            if r.subject_id == subject_id and r.date == on_date and (marked_by is None or r.marked_by == marked_by)
        ]
        rows.sort(key=lambda r: (r.period, r.student_id))
        return [AttendanceEntry(student_id=r.student_id, period=r.period, status=r.status) for r in rows]

    def list_for_student(self, *, student_id, semester_id=None, subject_id=None):
        rows = [
            r
            for r in self.rows.values()
            if r.student_id == student_id
            and (semester_id is None or r.semester_id == semester_id)
            and (subject_id is None or r.subject_id == subject_id)
        ]
        return sorted(rows, key=lambda r: (r.date, r.period))

    def list_for_student_date(self, *, student_id, on_date):
        return sorted(
            (r for r in self.rows.values() if r.student_id == student_id and r.date == on_date),
            key=lambda r: r.period,
        )


class FakeSubjectsRepo:
    def __init__(self, subjects, assignments):
        self._subjects = {s.subject_id: s for s in subjects}
        self._assignments = set(assignments)

    def get_by_id(self, subject_id):
        return self._subjects.get(subject_id)

    def is_assigned(self, faculty_id, subject_id):
        return (faculty_id, subject_id) in self._assignments

    def list_mdc_subjects(self, *, department_id, exclude_department_id):
        return []


class FakeFacultyRepo:
    def __init__(self, faculty):
        self._faculty = {f.faculty_id: f for f in faculty}

    def get_by_id(self, faculty_id):
        return self._faculty.get(faculty_id)

    def get_by_user_id(self, user_id):
        return next((f for f in self._faculty.values() if f.user_id == user_id), None)

    def list_active_in_department(self, department_id):
        return [f for f in self._faculty.values() if f.department_id == department_id and f.is_active]


class FakeStudentsRepo:
    def __init__(self, students):
        self._students = {s.student_id: s for s in students}

    def get_by_id(self, student_id):
        return self._students.get(student_id)

    def get_by_user_id(self, user_id):
        return next((s for s in self._students.values() if s.user_id == user_id), None)

    def get_by_ids(self, student_ids):
        return [self._students[i] for i in student_ids if i in self._students]


class FakeTimetableRepo:
    def __init__(self, slots):
        self._slots = set(slots)

    def is_scheduled(self, *, subject_id, day_of_week, semester_id):
        return (subject_id, day_of_week, semester_id) in self._slots


class FakeNotificationsRepo:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def create_many(self, *, user_ids, payload):
        if self.fail:
            raise RuntimeError("notifications table unavailable")
        self.sent.append((list(user_ids), payload))
        return len(user_ids)


def _student(student_id, semester_id="sem-1"):
    return Student(
        student_id=student_id,
        user_id=f"user-{student_id}",
        name=student_id.upper(),
        enrollment_no=f"EN-{student_id}",
        department_id="cs",
        semester_id=semester_id,
    )


def _build(notifications=None):
    attendance = FakeAttendanceRepo()
    subjects = FakeSubjectsRepo(
        [Subject(subject_id="sub-1", code="CS101", name="Programming", department_id="cs", semester_id="sem-1")],
        assignments=[("fac-1", "sub-1")],
    )
    faculty = FakeFacultyRepo(
        [
            Faculty(faculty_id="fac-1", user_id="user-fac-1", name="Priya", employee_id="E1", department_id="cs"),
            Faculty(faculty_id="fac-2", user_id="user-fac-2", name="Rahul", employee_id="E2", department_id="cs"),
        ]
    )
    students = FakeStudentsRepo([_student("s1"), _student("s2"), _student("s9", semester_id="sem-3")])
    notifier = NotificationDispatcher(notifications) if notifications is not None else None
    timetable = FakeTimetableRepo([("sub-1", TODAY.isoweekday(), "sem-1")])
    svc = AttendanceService(attendance, subjects, students, faculty, timetable, notifier=notifier)
    return svc, attendance


FACULTY = Caller(user_id="user-fac-1", role=Role.FACULTY)


def test_submit_batch_is_idempotent():
    svc, repo = _build()
    records = [
        {"student_id": "s1", "period": 1, "status": "PRESENT"},
        {"student_id": "s2", "period": 1, "status": "ABSENT"},
    ]

    first = svc.submit_batch("sub-1", TODAY, records, "fac-1", today=TODAY)
    second = svc.submit_batch("sub-1", TODAY, records, "fac-1", today=TODAY)

    assert first.success and second.success
    assert first.data.count == 2
    assert len(repo.rows) == 2
    statuses = {k[0]: r.status for k, r in repo.rows.items()}
    assert statuses == {"s1": AttendanceStatus.PRESENT, "s2": AttendanceStatus.ABSENT}


def test_resubmit_overwrites_status_and_keeps_one_row_per_slot():
    svc, repo = _build()
    svc.submit_batch("sub-1", TODAY, [{"student_id": "s1", "period": 2, "status": "ABSENT"}], "fac-1", today=TODAY)
    svc.submit_batch("sub-1", TODAY, [{"student_id": "s1", "period": 2, "status": "PRESENT"}], "fac-1", today=TODAY)

    assert len(repo.rows) == 1
    assert next(iter(repo.rows.values())).status == AttendanceStatus.PRESENT


def test_future_date_is_rejected_and_nothing_is_written():
    svc, repo = _build()
    result = svc.submit_batch(
        "sub-1", date(2026, 3, 5), [{"student_id": "s1", "period": 1, "status": "PRESENT"}], "fac-1", today=TODAY
    )

    assert result.success is False
    assert result.kind == ErrorKind.FUTURE_DATE
    assert repo.rows == {}
    assert repo.upsert_calls == 0


def test_empty_batch_is_a_validation_error():
    svc, repo = _build()
    result = svc.submit_batch("sub-1", TODAY, [], "fac-1", today=TODAY)

    assert result.kind == ErrorKind.VALIDATION
    assert repo.upsert_calls == 0


def test_period_out_of_range_is_rejected():
    svc, _ = _build()
    result = svc.submit_batch("sub-1", TODAY, [{"student_id": "s1", "period": 6, "status": "PRESENT"}], "fac-1", today=TODAY)

    assert result.kind == ErrorKind.VALIDATION


def test_unknown_subject_is_not_found():
    svc, _ = _build()
    result = svc.submit_batch("nope", TODAY, [{"student_id": "s1", "period": 1, "status": "PRESENT"}], "fac-1", today=TODAY)

    assert result.kind == ErrorKind.NOT_FOUND


def test_get_by_date_filters_by_marker():
    svc, _ = _build()
    svc.submit_batch("sub-1", TODAY, [{"student_id": "s1", "period": 1, "status": "PRESENT"}], "fac-1", today=TODAY)
    svc.submit_batch("sub-1", TODAY, [{"student_id": "s2", "period": 3, "status": "ABSENT"}], "fac-2", today=TODAY)

    own = svc.get_by_date("sub-1", "2026-03-04", marked_by="fac-1")
    everyone = svc.get_by_date("sub-1", "2026-03-04")

    assert [e.student_id for e in own.data] == ["s1"]
    assert [(e.student_id, e.period) for e in everyone.data] == [("s1", 1), ("s2", 3)]


def test_get_by_date_returns_normalized_triples():
    svc, _ = _build()
    svc.submit_batch("sub-1", TODAY, [{"studentId": "s1", "period": "4", "status": "absent"}], "fac-1", today=TODAY)

    entries = svc.get_by_date("sub-1", TODAY).data

    assert entries == [AttendanceEntry(student_id="s1", period=4, status=AttendanceStatus.ABSENT)]


def test_mark_attendance_requires_faculty_role():
    svc, repo = _build()
    result = svc.mark_attendance(
        Caller(user_id="user-s1", role=Role.STUDENT),
        "sub-1",
        TODAY,
        [{"student_id": "s1", "period": 1, "status": "PRESENT"}],
        today=TODAY,
    )

    assert result.kind == ErrorKind.UNAUTHORIZED
    assert repo.rows == {}


def test_mark_attendance_rejects_unassigned_instructor():
    svc, repo = _build()
    result = svc.mark_attendance(
        Caller(user_id="user-fac-2", role=Role.FACULTY),
        "sub-1",
        TODAY,
        [{"student_id": "s1", "period": 1, "status": "PRESENT"}],
        today=TODAY,
    )

    assert result.kind == ErrorKind.UNAUTHORIZED
    assert repo.rows == {}


def test_mark_attendance_rejects_sunday():
    svc, _ = _build()
    result = svc.mark_attendance(FACULTY, "sub-1", SUNDAY, [{"student_id": "s1", "period": 1, "status": "PRESENT"}], today=TODAY)

    assert result.kind == ErrorKind.VALIDATION
    assert result.message == "No classes on Sunday"


def test_mark_attendance_rejects_day_without_a_timetable_slot():
    svc, repo = _build()
    tuesday = date(2026, 3, 3)
    result = svc.mark_attendance(FACULTY, "sub-1", tuesday, [{"student_id": "s1", "period": 1, "status": "PRESENT"}], today=TODAY)

    assert result.kind == ErrorKind.VALIDATION
    assert result.message == "Subject not scheduled for this day"
    assert repo.rows == {}


def test_mark_attendance_rejects_students_from_other_semesters():
    svc, repo = _build()
    result = svc.mark_attendance(
        FACULTY,
        "sub-1",
        TODAY,
        [
            {"student_id": "s1", "period": 1, "status": "PRESENT"},
            {"student_id": "s9", "period": 1, "status": "PRESENT"},
        ],
        today=TODAY,
    )

    assert result.kind == ErrorKind.VALIDATION
    assert repo.rows == {}


def test_mark_attendance_records_marker_and_notifies_students():
    notifications = FakeNotificationsRepo()
    svc, repo = _build(notifications)
    result = svc.mark_attendance(
        FACULTY,
        "sub-1",
        "2026-03-04",
        [
            {"student_id": "s1", "period": 1, "status": "PRESENT"},
            {"student_id": "s1", "period": 2, "status": "PRESENT"},
            {"student_id": "s2", "period": 1, "status": "ABSENT"},
        ],
        today=TODAY,
    )

    assert result.success is True
    assert result.data.count == 3
    assert {r.marked_by for r in repo.rows.values()} == {"fac-1"}
    assert {r.semester_id for r in repo.rows.values()} == {"sem-1"}

    assert len(notifications.sent) == 1
    recipients, payload = notifications.sent[0]
    assert recipients == ["user-s1", "user-s2"]
    assert payload.type == NotificationType.ATTENDANCE
    assert payload.title == "Attendance Marked"


def test_notification_failure_does_not_undo_attendance():
    svc, repo = _build(FakeNotificationsRepo(fail=True))
    result = svc.mark_attendance(FACULTY, "sub-1", TODAY, [{"student_id": "s1", "period": 1, "status": "PRESENT"}], today=TODAY)

    assert result.success is True
    assert len(repo.rows) == 1


def test_day_for_student_returns_periods_in_order():
    svc, _ = _build()
    svc.submit_batch(
        "sub-1",
        TODAY,
        [
            {"student_id": "s1", "period": 3, "status": "ABSENT"},
            {"student_id": "s1", "period": 1, "status": "PRESENT"},
        ],
        "fac-1",
        today=TODAY,
    )

    result = svc.day_for_student("s1", TODAY)

    assert [r.period for r in result.data] == [1, 3]


def test_invalid_date_string_is_a_validation_error():
    svc, _ = _build()
    result = svc.day_for_student("s1", "04/03/2026")

    assert result.kind == ErrorKind.VALIDATION


def test_default_today_comes_from_the_local_clock(fixed_now):
    svc, repo = _build()

    ok = svc.submit_batch("sub-1", fixed_now.date(), [{"student_id": "s1", "period": 2, "status": "PRESENT"}], "fac-1")
    late = svc.submit_batch("sub-1", "2026-03-05", [{"student_id": "s1", "period": 2, "status": "PRESENT"}], "fac-1")

    assert ok.success is True
    assert late.kind == ErrorKind.FUTURE_DATE
    assert next(iter(repo.rows.values())).updated_at == fixed_now
