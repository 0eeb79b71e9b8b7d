from __future__ import annotations

import logging

from flask import Flask, jsonify, request, session

from ..core.exceptions import DomainError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = request.get_json(silent=True) or {}
        try:
            s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))
        except DomainError as e:
            return jsonify(e.to_dict()), e.http_status

        session.clear()
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value
        session["dept_id"] = s_user.dept_id
        logger.info("user %s logged in as %s", s_user.user_id, s_user.role.value)

        return jsonify(
            {
                "success": True,
                "user": {"id": s_user.user_id, "name": s_user.full_name, "role": s_user.role.value},
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    def me():
        if "user_id" not in session:
            return jsonify({"success": False, "code": "NOT_AUTHENTICATED", "message": "Please log in"}), 401
        return jsonify(
            {
                "success": True,
                "user": {"id": session["user_id"], "name": session.get("name"), "role": session.get("role")},
            }
        )
