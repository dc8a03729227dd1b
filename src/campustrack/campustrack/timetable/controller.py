from __future__ import annotations

import logging

from flask import Flask, request, session

from ..common.http import respond, server_error, unauthorized
from ..common.session import resolve_caller
from ..container import Container
from ..core.enums import Role
from .model import TimetableEntryInput

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _role():
        caller = resolve_caller(session)
        return caller.role if caller else None

    @app.route(
        "/api/admin/departments/<department_id>/semesters/<semester_id>/timetable",
        methods=["GET"],
        endpoint="api_cohort_timetable",
    )
    def api_cohort_timetable(department_id: str, semester_id: str):
        role = _role()
        if role is None:
            return unauthorized()
        return respond(
            container.timetable_service.cohort_timetable(
                current_role=role, department_id=department_id, semester_id=semester_id
            )
        )

    @app.route("/api/admin/timetable", methods=["POST"], endpoint="api_timetable_create")
    def api_timetable_create():
        role = _role()
        if role is None:
            return unauthorized()
        data = request.get_json(silent=True) or {}
        try:
            entry = TimetableEntryInput(
                day_of_week=data.get("day_of_week"),
                period=data.get("period"),
                subject_id=str(data.get("subject_id") or ""),
                faculty_id=str(data.get("faculty_id") or ""),
                department_id=str(data.get("department_id") or ""),
                semester_id=str(data.get("semester_id") or ""),
                room=data.get("room"),
            )
            result = container.timetable_service.create_entry(current_role=role, data=entry)
        except Exception:
            logger.exception("Create timetable entry failed")
            return server_error("Failed to create timetable entry")
        return respond(result, success_status=201)

    @app.route("/api/admin/timetable/<entry_id>", methods=["PUT", "DELETE"], endpoint="api_timetable_entry")
    def api_timetable_entry(entry_id: str):
        role = _role()
        if role is None:
            return unauthorized()
        if request.method == "DELETE":
            return respond(container.timetable_service.delete_entry(current_role=role, entry_id=entry_id))

        data = request.get_json(silent=True) or {}
        try:
            result = container.timetable_service.update_entry(current_role=role, entry_id=entry_id, changes=data)
        except Exception:
            logger.exception("Update timetable entry failed")
            return server_error("Failed to update timetable entry")
        return respond(result)

    @app.route("/api/faculty/timetable", methods=["GET"], endpoint="api_faculty_timetable")
    def api_faculty_timetable():
        day = request.args.get("day")
        return respond(container.timetable_service.faculty_timetable(resolve_caller(session), day))

    @app.route("/api/faculty/timetable/today", methods=["GET"], endpoint="api_faculty_today")
    def api_faculty_today():
        return respond(container.timetable_service.today_classes(resolve_caller(session)))

    @app.route("/api/faculty/timetable/<on_date>/subjects", methods=["GET"], endpoint="api_faculty_subjects_for_date")
    def api_faculty_subjects_for_date(on_date: str):
        """Subjects (with periods) the calling instructor can mark on a date."""
        return respond(container.timetable_service.subjects_for_date(resolve_caller(session), on_date))

    @app.route("/api/me/timetable", methods=["GET"], endpoint="api_my_timetable")
    def api_my_timetable():
        caller = resolve_caller(session)
        if not caller or caller.role != Role.STUDENT:
            return unauthorized()
        return respond(container.timetable_service.student_timetable(caller))

    @app.route("/api/me/timetable/today", methods=["GET"], endpoint="api_my_timetable_today")
    def api_my_timetable_today():
        caller = resolve_caller(session)
        if not caller or caller.role != Role.STUDENT:
            return unauthorized()
        return respond(container.timetable_service.today_schedule(caller))
