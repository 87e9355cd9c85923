from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_role, current_user_id, error_response, login_required
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _parse_date(value: Optional[str]):
        if not value:
            return None
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError("Ngày không hợp lệ (YYYY-MM-DD)")

    @app.route("/api/attendance/student", methods=["GET"], endpoint="student_attendance")
    @app.route("/api/attendance/student/<int:student_id>", methods=["GET"], endpoint="student_attendance_by_id")
    @login_required
    def student_attendance(student_id: Optional[int] = None):
        try:
            target = container.report_service.resolve_student(
                current_user_id=current_user_id(),
                current_role=current_role(),
                requested_student_id=student_id,
            )
            report = container.report_service.build_student_report(
                target,
                start=_parse_date(request.args.get("startDate")),
                end=_parse_date(request.args.get("endDate")),
                subject=request.args.get("subject"),
            )
        except Exception as e:
            return error_response(e)

        return jsonify({"success": True, "data": {"attendance": report.rows, "statistics": report.statistics}}), 200
