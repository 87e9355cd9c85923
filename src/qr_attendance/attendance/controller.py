from __future__ import annotations

import json

from flask import Flask, jsonify, request, session

from ..common.web import current_user_id, error_response, json_body, role_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import MalformedCredentialError


def register(app: Flask, container: Container) -> None:
    def _mark(raw_payload):
        result = container.attendance_verifier.verify(
            raw_payload,
            current_user_id(),
            student_name=session.get("name"),
        )
        return jsonify(
            {
                "success": True,
                "message": "Điểm danh thành công",
                "attendance": result.to_dict(),
            }
        ), 200

    @app.route("/api/attendance/mark-qr", methods=["POST"], endpoint="mark_qr")
    @role_required(Role.STUDENT)
    def mark_qr():
        """Student submits the string decoded from the QR code by the client scanner."""
        data = json_body()
        raw = data.get("qrData")
        if isinstance(raw, dict):
            raw = json.dumps(raw)
        try:
            return _mark(raw)
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/mark-qr/image", methods=["POST"], endpoint="mark_qr_image")
    @role_required(Role.STUDENT)
    def mark_qr_image():
        """Accept an uploaded photo of the QR code, decode it server-side, then mark attendance."""
        # Needs the zbar shared library; only loaded when this endpoint is used.
        from PIL import Image, UnidentifiedImageError
        from pyzbar.pyzbar import decode as pyzbar_decode

        try:
            if "image" not in request.files:
                raise MalformedCredentialError("Thiếu file ảnh")

            try:
                img = Image.open(request.files["image"].stream).convert("RGB")
            except UnidentifiedImageError:
                raise MalformedCredentialError("File ảnh không hợp lệ")

            decoded = pyzbar_decode(img)
            if not decoded:
                raise MalformedCredentialError("Không phát hiện mã QR trong ảnh")

            return _mark(decoded[0].data.decode("utf-8", errors="replace").strip())
        except Exception as e:
            return error_response(e)
