from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_int
from ..core.enums import Role
from ..core.exceptions import DomainError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def role_required(role: Role):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                if "user_id" not in session:
                    return jsonify({"success": False, "code": "NOT_AUTHENTICATED", "message": "Please log in"}), 401
                if session.get("role") != role.value:
                    return jsonify({"success": False, "code": "NOT_AUTHORIZED", "message": "Forbidden"}), 403
                try:
                    return view(*args, **kwargs)
                except DomainError as e:
                    return jsonify(e.to_dict()), e.http_status
                except Exception:
                    logger.exception("unhandled error in %s", request.path)
                    return jsonify({"success": False, "code": "INTERNAL_ERROR", "message": "Internal server error"}), 500

            return wrapper

        return decorator

    teacher_required = role_required(Role.TEACHER)
    student_required = role_required(Role.STUDENT)

    @app.route("/api/attendance/start", methods=["POST"], endpoint="attendance_start")
    @teacher_required
    def attendance_start():
        data = request.get_json(silent=True) or {}
        schedule_id = data.get("classScheduleId", data.get("scheduledClassId"))
        if schedule_id in (None, ""):
            raise ValidationError("classScheduleId and location are required")

        s = container.session_service.open(
            schedule_id=require_int(schedule_id, "classScheduleId"),
            teacher_id=int(session["user_id"]),
            anchor_lat=data.get("latitude"),
            anchor_lon=data.get("longitude"),
        )
        return jsonify({"success": True, "message": "Attendance session started", "session": s.to_dict()}), 201

    @app.route("/api/attendance/close/<int:session_id>", methods=["POST"], endpoint="attendance_close")
    @teacher_required
    def attendance_close(session_id: int):
        s = container.session_service.close(session_id=session_id, teacher_id=int(session["user_id"]))
        return jsonify({"success": True, "message": "Attendance session closed", "session": s.to_dict()})

    @app.route("/api/attendance/completed-sessions", methods=["GET"], endpoint="attendance_completed_sessions")
    @teacher_required
    def attendance_completed_sessions():
        date_s = request.args.get("date")
        try:
            day = parse_iso_date(date_s) if date_s else None
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD")

        rows = container.session_service.list_for_teacher_on(teacher_id=int(session["user_id"]), day=day)
        return jsonify({"success": True, "count": len(rows), "sessions": [r.to_dict() for r in rows]})

    @app.route("/api/attendance/check-today", methods=["GET"], endpoint="attendance_check_today")
    @teacher_required
    def attendance_check_today():
        items = container.session_service.check_today(teacher_id=int(session["user_id"]))
        return jsonify({"success": True, "classes": [i.to_dict() for i in items]})

    @app.route("/api/attendance/active", methods=["GET"], endpoint="attendance_active")
    @student_required
    def attendance_active():
        view = container.session_service.find_active_for_student(int(session["user_id"]))
        return jsonify({"success": True, "session": view.to_dict()})

    @app.route("/api/attendance/session/<int:session_id>", methods=["GET"], endpoint="attendance_session_detail")
    @student_required
    def attendance_session_detail(session_id: int):
        view = container.session_service.get_detail_for_student(
            session_id=session_id,
            student_id=int(session["user_id"]),
        )
        return jsonify({"success": True, "session": view.to_dict()})
