from __future__ import annotations

import logging

from flask import Flask, request, session

from ..common.http import respond, server_error, unauthorized
from ..common.session import resolve_caller
from ..container import Container
from ..core.enums import Role

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_attendance_mark")
    def api_attendance_mark():
        data = request.get_json(silent=True) or {}
        try:
            result = container.attendance_service.mark_attendance(
                resolve_caller(session),
                str(data.get("subject_id") or data.get("subjectId") or ""),
                data.get("date"),
                data.get("records") or [],
            )
        except Exception:
            logger.exception("Mark attendance failed")
            return server_error("Failed to mark attendance")
        return respond(result)

    @app.route("/api/attendance/<subject_id>/<on_date>", methods=["GET"], endpoint="api_attendance_by_date")
    def api_attendance_by_date(subject_id: str, on_date: str):
        """Prior marks for the editing sheet: only the calling instructor's own marks."""
        caller = resolve_caller(session)
        if not caller or caller.role != Role.FACULTY:
            return unauthorized()

        faculty = container.faculty_repo.get_by_user_id(caller.user_id)
        if not faculty or not container.subjects_repo.is_assigned(faculty.faculty_id, subject_id):
            return unauthorized()

        try:
            result = container.attendance_service.get_by_date(subject_id, on_date, marked_by=faculty.faculty_id)
        except Exception:
            logger.exception("Fetch attendance failed")
            return server_error("Failed to fetch attendance")
        return respond(result)

    @app.route("/api/me/attendance/<on_date>", methods=["GET"], endpoint="api_my_attendance_day")
    def api_my_attendance_day(on_date: str):
        caller = resolve_caller(session)
        if not caller or caller.role != Role.STUDENT:
            return unauthorized()

        student = container.students_repo.get_by_user_id(caller.user_id)
        if not student:
            return unauthorized()
        return respond(container.attendance_service.day_for_student(student.student_id, on_date))
