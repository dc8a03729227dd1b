from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from src.campustrack.campustrack.core.enums import ErrorKind, NotificationType, Role
from src.campustrack.campustrack.core.exceptions import DeletedError, NoChangeError, NotFoundError
from src.campustrack.campustrack.notifications.dispatcher import NotificationDispatcher
from src.campustrack.campustrack.students.model import (
    HistoryEntry,
    RosterEntry,
    Student,
    default_transition_reason,
)
from src.campustrack.campustrack.students.semester_model import Semester
from src.campustrack.campustrack.students.service import SemesterTransitionService


class FakeStudentsRepo:
    def __init__(self, students):
        self._students = {s.student_id: s for s in students}
        self.history: dict[str, list[HistoryEntry]] = {}
        self._clock = 0

    def get_by_id(self, student_id):
        return self._students.get(student_id)

    def apply_semester_transition(
        self, *, student_id, new_semester_id, new_semester_name, current_year, changed_by, reason=None
    ):
        s = self._students.get(student_id)
        if s is None:
            raise NotFoundError("Student not found")
        if s.is_deleted:
            raise DeletedError("Cannot update deleted student")
        if s.semester_id == new_semester_id:
            raise NoChangeError("Student is already in this semester")

        old_name = SEMESTERS[s.semester_id].name
        self._students[student_id] = replace(s, semester_id=new_semester_id, current_year=current_year)
        self._clock += 1
        self.history.setdefault(student_id, []).append(
            HistoryEntry(
                semester_id=new_semester_id,
                semester_name=new_semester_name,
                changed_at=datetime(2026, 6, 1, 9, 0, self._clock),
                changed_by=changed_by,
                reason=reason or default_transition_reason(old_name, new_semester_name),
            )
        )
        return old_name

    def list_history(self, student_id):
        return sorted(self.history.get(student_id, []), key=lambda h: h.changed_at, reverse=True)

    def students_in(self, semester_id, department_id):
        return [
            RosterEntry(student_id=s.student_id, enrollment_no=s.enrollment_no, name=s.name)
            for s in sorted(self._students.values(), key=lambda s: s.enrollment_no)
            if s.semester_id == semester_id and s.department_id == department_id and not s.is_deleted
        ]


SEMESTERS = {
    "sem-1": Semester(semester_id="sem-1", number=1, name="Semester 1", academic_year=1),
    "sem-2": Semester(semester_id="sem-2", number=2, name="Semester 2", academic_year=1, is_odd=False),
    "sem-3": Semester(semester_id="sem-3", number=3, name="Semester 3", academic_year=2),
}


class FakeSemestersRepo:
    def get_by_id(self, semester_id):
        return SEMESTERS.get(semester_id)


class FakeNotificationsRepo:
    def __init__(self):
        self.sent = []

    def create_many(self, *, user_ids, payload):
        self.sent.append((list(user_ids), payload))
        return len(user_ids)


def _student(student_id, semester_id="sem-1", deleted=False):
    return Student(
        student_id=student_id,
        user_id=f"user-{student_id}",
        name=student_id.upper(),
        enrollment_no=f"EN-{student_id}",
        department_id="cs",
        semester_id=semester_id,
        current_year=1,
        deleted_at=datetime(2026, 1, 1) if deleted else None,
    )


def _build():
    students = FakeStudentsRepo([_student("s1"), _student("s2", deleted=True), _student("s3", semester_id="sem-2")])
    notifications = FakeNotificationsRepo()
    svc = SemesterTransitionService(students, FakeSemestersRepo(), notifier=NotificationDispatcher(notifications))
    return svc, students, notifications


def _move(svc, student_id, semester_id, role=Role.ADMIN, reason=None):
    return svc.transition(
        current_role=role,
        student_id=student_id,
        new_semester_id=semester_id,
        changed_by="admin-1",
        reason=reason,
    )


def test_transition_updates_semester_and_appends_history():
    svc, students, notifications = _build()

    result = _move(svc, "s1", "sem-3")

    assert result.success is True
    assert result.data.new_semester_name == "Semester 3"
    student = students.get_by_id("s1")
    assert student.semester_id == "sem-3"
    assert student.current_year == 2

    history = svc.history("s1").data
    assert len(history) == 1
    assert history[0].semester_id == student.semester_id
    assert history[0].reason == "Manual Update: Semester 1 → Semester 3"

    (recipients, payload), = notifications.sent
    assert recipients == ["user-s1"]
    assert payload.type == NotificationType.SYSTEM


def test_history_head_always_matches_current_semester():
    svc, students, _ = _build()

    _move(svc, "s1", "sem-2", reason="Promoted")
    _move(svc, "s1", "sem-3")

    history = svc.history("s1").data
    assert [h.semester_id for h in history] == ["sem-3", "sem-2"]
    assert history[0].semester_id == students.get_by_id("s1").semester_id
    assert history[1].reason == "Promoted"


def test_same_semester_is_no_change_and_writes_nothing():
    svc, students, notifications = _build()

    result = _move(svc, "s1", "sem-1")

    assert result.kind == ErrorKind.NO_CHANGE
    assert students.history == {}
    assert notifications.sent == []


def test_deleted_student_cannot_move():
    svc, students, _ = _build()

    result = _move(svc, "s2", "sem-2")

    assert result.kind == ErrorKind.DELETED
    assert students.get_by_id("s2").semester_id == "sem-1"


def test_unknown_semester_is_invalid():
    svc, _, _ = _build()

    assert _move(svc, "s1", "sem-99").kind == ErrorKind.INVALID_SEMESTER


def test_unknown_student_is_not_found():
    svc, _, _ = _build()

    assert _move(svc, "ghost", "sem-2").kind == ErrorKind.NOT_FOUND


def test_only_admin_can_transition():
    svc, students, _ = _build()

    result = _move(svc, "s1", "sem-2", role=Role.FACULTY)

    assert result.kind == ErrorKind.UNAUTHORIZED
    assert students.get_by_id("s1").semester_id == "sem-1"


def test_blank_reason_falls_back_to_default():
    svc, _, _ = _build()

    _move(svc, "s3", "sem-3", reason="   ")

    assert svc.history("s3").data[0].reason == "Manual Update: Semester 2 → Semester 3"


def test_roster_excludes_deleted_students():
    svc, _, _ = _build()

    roster = svc.roster(semester_id="sem-1", department_id="cs").data

    assert [r.student_id for r in roster] == ["s1"]


class StaleReadStudentsRepo(FakeStudentsRepo):
    """Serves the profile as it was before a concurrent move landed."""

    def __init__(self, students, stale):
        super().__init__(students)
        self._stale = {s.student_id: s for s in stale}

    def get_by_id(self, student_id):
        return self._stale.get(student_id) or super().get_by_id(student_id)


def test_concurrent_move_to_same_semester_is_no_change():
    students = StaleReadStudentsRepo([_student("s1", semester_id="sem-3")], stale=[_student("s1")])
    notifications = FakeNotificationsRepo()
    svc = SemesterTransitionService(students, FakeSemestersRepo(), notifier=NotificationDispatcher(notifications))

    result = _move(svc, "s1", "sem-3")

    assert result.kind == ErrorKind.NO_CHANGE
    assert students.history == {}
    assert notifications.sent == []


def test_default_reason_names_the_semester_actually_left():
    students = StaleReadStudentsRepo([_student("s1", semester_id="sem-2")], stale=[_student("s1")])
    svc = SemesterTransitionService(students, FakeSemestersRepo())

    result = _move(svc, "s1", "sem-3")

    assert result.success is True
    assert svc.history("s1").data[0].reason == "Manual Update: Semester 2 → Semester 3"


def test_concurrent_delete_blocks_the_move():
    students = StaleReadStudentsRepo([_student("s1", deleted=True)], stale=[_student("s1")])
    svc = SemesterTransitionService(students, FakeSemestersRepo())

    result = _move(svc, "s1", "sem-2")

    assert result.kind == ErrorKind.DELETED
    assert students.history == {}
