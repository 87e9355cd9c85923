from __future__ import annotations

from flask import Flask, jsonify

from ..common.validators import require_positive_int
from ..common.web import current_user_id, error_response, json_body, role_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/generate-qr", methods=["POST"], endpoint="generate_qr")
    @role_required(Role.TEACHER)
    def generate_qr():
        """Teacher generates (or regenerates) the QR code of a class session."""
        data = json_body()
        try:
            session_id = require_positive_int(data.get("classSessionId"), "Mã buổi học")
            issued = container.credential_issuer.issue(session_id, current_user_id())
        except Exception as e:
            return error_response(e)

        return jsonify(
            {
                "success": True,
                "message": "Tạo mã QR thành công",
                "qrCode": issued.qr_code,
                "expiryTime": issued.credential.expires_at.isoformat(),
            }
        ), 200
