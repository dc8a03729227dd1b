from __future__ import annotations

from flask import Flask, request, session

from ..common.http import respond, unauthorized
from ..common.session import resolve_caller
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    def _current_student():
        caller = resolve_caller(session)
        if not caller or caller.role != Role.STUDENT:
            return None
        return container.students_repo.get_by_user_id(caller.user_id)

    @app.route("/api/me/attendance/summary", methods=["GET"], endpoint="api_my_attendance_summary")
    def api_my_attendance_summary():
        """Current-semester overview for the signed-in student."""
        student = _current_student()
        if not student:
            return unauthorized()
        return respond(container.report_service.semester_summary(student.student_id, student.semester_id))

    @app.route("/api/me/attendance/daily", methods=["GET"], endpoint="api_my_attendance_daily")
    def api_my_attendance_daily():
        """Five-period bar for a date (default today), regular and MDC merged."""
        student = _current_student()
        if not student:
            return unauthorized()
        return respond(container.report_service.daily_status(student.student_id, request.args.get("date")))

    @app.route("/api/me/attendance/range", methods=["GET"], endpoint="api_my_attendance_range")
    def api_my_attendance_range():
        student = _current_student()
        if not student:
            return unauthorized()
        return respond(
            container.report_service.attendance_range(
                student.student_id, request.args.get("start"), request.args.get("end")
            )
        )

    @app.route("/api/students/<student_id>/subjects/<subject_id>/stats", methods=["GET"], endpoint="api_student_subject_stats")
    def api_student_subject_stats(student_id: str, subject_id: str):
        caller = resolve_caller(session)
        if not caller or caller.role not in {Role.ADMIN, Role.FACULTY}:
            return unauthorized()
        return respond(container.report_service.stats_for_student_subject(student_id, subject_id))
