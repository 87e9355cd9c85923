from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.web import error_response, json_body, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        try:
            s_user = container.auth_service.authenticate(str(data.get("username", "")), str(data.get("password", "")))
        except Exception as e:
            return error_response(e)

        session.clear()
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value

        return jsonify({"success": True, "message": "Đăng nhập thành công!", "user": s_user.to_dict()}), 200

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True, "message": "Đã đăng xuất hệ thống."}), 200

    @app.route("/api/auth/me", endpoint="me")
    @login_required
    def me():
        return jsonify(
            {
                "success": True,
                "user": {"id": session["user_id"], "name": session.get("name"), "role": session.get("role")},
            }
        ), 200
