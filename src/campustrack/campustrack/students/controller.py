from __future__ import annotations

import logging

from flask import Flask, request, session

from ..common.http import respond, server_error, unauthorized
from ..common.session import resolve_caller
from ..container import Container
from ..core.enums import Role

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/students/<student_id>/semester", methods=["POST"], endpoint="api_student_semester")
    def api_student_semester(student_id: str):
        caller = resolve_caller(session)
        if not caller:
            return unauthorized()

        data = request.get_json(silent=True) or {}
        try:
            result = container.semester_service.transition(
                current_role=caller.role,
                student_id=student_id,
                new_semester_id=str(data.get("semester_id") or ""),
                changed_by=caller.user_id,
                reason=data.get("reason"),
            )
        except Exception:
            logger.exception("Update student semester failed")
            return server_error("Failed to update student semester")
        return respond(result)

    @app.route("/api/admin/students/<student_id>/semester-history", methods=["GET"], endpoint="api_student_semester_history")
    def api_student_semester_history(student_id: str):
        caller = resolve_caller(session)
        if not caller or caller.role != Role.ADMIN:
            return unauthorized()
        return respond(container.semester_service.history(student_id))

    @app.route("/api/roster/<semester_id>/<department_id>", methods=["GET"], endpoint="api_roster")
    def api_roster(semester_id: str, department_id: str):
        caller = resolve_caller(session)
        if not caller or caller.role not in {Role.ADMIN, Role.FACULTY}:
            return unauthorized()
        return respond(container.semester_service.roster(semester_id=semester_id, department_id=department_id))
