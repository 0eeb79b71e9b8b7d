from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.validators import require_int
from ..core.enums import Role
from ..core.exceptions import DomainError
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

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @role_required(Role.STUDENT)
    def attendance_mark():
        data = request.get_json(silent=True) or {}
        # "accuracy" may be sent by clients; it is not used.
        mark = container.attendance_service.mark(
            student_id=int(session["user_id"]),
            session_id=require_int(data.get("sessionId"), "sessionId"),
            device_id=data.get("deviceId"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
        )
        return jsonify({"success": True, "message": "Attendance marked successfully", "attendance": mark.to_dict()})

    @app.route("/api/attendance/live/<int:session_id>", methods=["GET"], endpoint="attendance_live")
    @role_required(Role.TEACHER)
    def attendance_live(session_id: int):
        roster = container.attendance_service.live_roster(session_id=session_id, teacher_id=int(session["user_id"]))
        return jsonify({"success": True, "count": len(roster), "students": [r.to_dict() for r in roster]})
