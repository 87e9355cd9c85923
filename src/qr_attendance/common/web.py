from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import DomainError, UnavailableError

logger = logging.getLogger(__name__)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Vui lòng đăng nhập để tiếp tục!", "error_code": "unauthenticated"}), 401
        return view(*args, **kwargs)

    return wrapper


def role_required(*roles: Role):
    """Allow only the given roles (implies login_required)."""

    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Vui lòng đăng nhập để tiếp tục!", "error_code": "unauthenticated"}), 401
            if session.get("role") not in allowed:
                return jsonify({"success": False, "message": "Bạn không có quyền", "error_code": "forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    return Role(session.get("role"))


def json_body() -> dict:
    """Request JSON object, or an empty dict when the body is not a JSON object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def error_response(exc: Exception):
    """Map service exceptions to the JSON error shape shared by all endpoints."""

    if isinstance(exc, DomainError):
        return jsonify({"success": False, "message": str(exc), "error_code": exc.code}), exc.http_status

    if isinstance(exc, UnavailableError):
        logger.error("Storage unavailable: %s", exc)
        return (
            jsonify({"success": False, "message": "Hệ thống tạm thời không khả dụng", "error_code": exc.code}),
            exc.http_status,
        )

    logger.exception("Unhandled error")
    return jsonify({"success": False, "message": "Lỗi hệ thống", "error_code": "internal_error"}), 500
