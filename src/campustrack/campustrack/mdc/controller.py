from __future__ import annotations

import logging

from flask import Flask, request, session

from ..common.http import respond, server_error, unauthorized
from ..common.session import resolve_caller
from ..container import Container
from ..core.enums import Role
from .model import MDCCourseInput

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _admin_role():
        caller = resolve_caller(session)
        return caller.role if caller else None

    @app.route("/api/admin/mdc/<home_id>/<mdc_id>/catalog", methods=["GET"], endpoint="api_mdc_catalog")
    def api_mdc_catalog(home_id: str, mdc_id: str):
        if _admin_role() != Role.ADMIN:
            return unauthorized()
        return respond(container.mdc_service.eligible_courses(home_id, mdc_id))

    @app.route("/api/admin/mdc/<home_id>/<mdc_id>/courses", methods=["GET"], endpoint="api_mdc_courses")
    def api_mdc_courses(home_id: str, mdc_id: str):
        if _admin_role() != Role.ADMIN:
            return unauthorized()
        return respond(container.mdc_service.list_courses(home_id, mdc_id))

    @app.route("/api/admin/mdc/courses", methods=["POST"], endpoint="api_mdc_save_course")
    def api_mdc_save_course():
        role = _admin_role()
        if role is None:
            return unauthorized()
        data = request.get_json(silent=True) or {}
        try:
            course_input = MDCCourseInput(
                home_department_id=str(data.get("home_department_id") or ""),
                mdc_department_id=str(data.get("mdc_department_id") or ""),
                year=data.get("year"),
                semester=data.get("semester"),
                course_name=str(data.get("course_name") or ""),
                student_ids=frozenset(str(s) for s in data.get("student_ids") or []),
                faculty_id=data.get("faculty_id") or None,
            )
            result = container.mdc_service.save_course(current_role=role, data=course_input)
        except Exception:
            logger.exception("Save MDC course failed")
            return server_error("Failed to save MDC course")
        return respond(result)

    @app.route("/api/admin/mdc/courses/<course_id>", methods=["DELETE"], endpoint="api_mdc_delete_course")
    def api_mdc_delete_course(course_id: str):
        role = _admin_role()
        if role is None:
            return unauthorized()
        return respond(container.mdc_service.delete_course(current_role=role, course_id=course_id))

    @app.route("/api/admin/mdc/courses/<course_id>/faculty", methods=["GET", "PUT"], endpoint="api_mdc_faculty")
    def api_mdc_faculty(course_id: str):
        role = _admin_role()
        if role != Role.ADMIN:
            return unauthorized()
        if request.method == "GET":
            return respond(container.mdc_service.eligible_faculty(course_id))
        data = request.get_json(silent=True) or {}
        return respond(
            container.mdc_service.assign_faculty(
                current_role=role,
                course_id=course_id,
                faculty_id=data.get("faculty_id") or None,
            )
        )

    @app.route(
        "/api/admin/mdc/courses/<course_id>/students/<student_id>",
        methods=["PUT", "DELETE"],
        endpoint="api_mdc_enrollment",
    )
    def api_mdc_enrollment(course_id: str, student_id: str):
        role = _admin_role()
        if role is None:
            return unauthorized()
        if request.method == "PUT":
            return respond(container.mdc_service.enroll_student(current_role=role, course_id=course_id, student_id=student_id))
        return respond(container.mdc_service.unenroll_student(current_role=role, course_id=course_id, student_id=student_id))

    @app.route("/api/faculty/mdc/courses", methods=["GET"], endpoint="api_faculty_mdc_courses")
    def api_faculty_mdc_courses():
        return respond(container.mdc_service.courses_for_faculty(resolve_caller(session)))

    @app.route("/api/faculty/mdc/courses/<course_id>/students", methods=["GET"], endpoint="api_faculty_mdc_roster")
    def api_faculty_mdc_roster(course_id: str):
        return respond(container.mdc_service.roster(resolve_caller(session), course_id))

    @app.route("/api/faculty/mdc/courses/<course_id>/attendance", methods=["GET", "POST"], endpoint="api_faculty_mdc_attendance")
    def api_faculty_mdc_attendance(course_id: str):
        caller = resolve_caller(session)
        if request.method == "GET":
            return respond(
                container.mdc_service.existing_attendance(
                    caller, course_id, request.args.get("date"), request.args.get("period")
                )
            )

        data = request.get_json(silent=True) or {}
        try:
            result = container.mdc_service.submit_attendance(
                caller,
                course_id,
                data.get("date"),
                data.get("period"),
                data.get("records") or [],
            )
        except Exception:
            logger.exception("Submit MDC attendance failed")
            return server_error("Failed to submit attendance")
        return respond(result)
