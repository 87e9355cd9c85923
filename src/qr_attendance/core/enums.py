from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Vai trò người dùng dùng cho phân quyền."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Trạng thái điểm danh lưu trong CSDL."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class VerificationMethod(str, Enum):
    QR_CODE = "qr-code"
    # Reserved; no face verification flow exists.
    FACE_RECOGNITION = "face-recognition"
    MANUAL = "manual"


class EventName(str, Enum):
    """Events published on a class session channel."""

    CREDENTIAL_ISSUED = "credential-issued"
    ATTENDANCE_COMMITTED = "attendance-committed"
