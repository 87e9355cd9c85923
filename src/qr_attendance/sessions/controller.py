from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.web import current_user_id, error_response, json_body, login_required, role_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _parse(value, parser, field_name: str):
        try:
            return parser(str(value or "").strip())
        except ValueError:
            raise ValidationError(f"{field_name} không hợp lệ")

    @app.route("/api/sessions", methods=["POST"], endpoint="create_session")
    @role_required(Role.TEACHER)
    def create_session():
        data = json_body()
        try:
            roster = data.get("enrolledStudents") or []
            if not isinstance(roster, list):
                raise ValidationError("Danh sách sinh viên không hợp lệ")

            created = container.session_registry.create_session(
                teacher_id=current_user_id(),
                subject=str(data.get("subject") or ""),
                classroom=str(data.get("classroom") or ""),
                session_date=_parse(data.get("date"), parse_iso_date, "Ngày học"),
                start_time=_parse(data.get("startTime"), parse_hhmm, "Giờ bắt đầu"),
                end_time=_parse(data.get("endTime"), parse_hhmm, "Giờ kết thúc"),
                enrolled_student_ids=roster,
            )
        except Exception as e:
            return error_response(e)

        return jsonify({"success": True, "message": "Đã tạo buổi học", "classSession": created.to_public_dict()}), 201

    @app.route("/api/sessions", methods=["GET"], endpoint="list_sessions")
    @role_required(Role.TEACHER)
    def list_sessions():
        try:
            sessions = container.session_registry.list_for_teacher(current_user_id())
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": [s.to_public_dict() for s in sessions]}), 200

    @app.route("/api/sessions/<int:session_id>", methods=["GET"], endpoint="get_session")
    @login_required
    def get_session(session_id: int):
        try:
            found = container.session_registry.get_session(session_id)
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "classSession": found.to_public_dict()}), 200

    @app.route("/api/sessions/<int:session_id>/deactivate", methods=["POST"], endpoint="deactivate_session")
    @role_required(Role.TEACHER)
    def deactivate_session(session_id: int):
        try:
            updated = container.session_registry.deactivate_session(session_id, teacher_id=current_user_id())
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "message": "Đã kết thúc buổi học", "classSession": updated.to_public_dict()}), 200
