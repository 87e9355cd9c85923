from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional


@dataclass(frozen=True)
class ClassSession:
    """Thực thể miền (domain): Buổi học.

    Holds at most one active QR credential (qr_token + qr_expires_at); issuing a new
    one overwrites the old.
    """

    session_id: int
    teacher_id: int
    subject: str
    classroom: str
    session_date: date
    start_time: time
    end_time: time
    enrolled_student_ids: tuple[int, ...] = ()
    qr_token: Optional[str] = None
    qr_expires_at: Optional[datetime] = None
    attendance_count: int = 0
    is_active: bool = True

    def to_public_dict(self) -> dict:
        """Observer-facing view; never exposes the token."""
        return {
            "id": self.session_id,
            "teacherId": self.teacher_id,
            "subject": self.subject,
            "classroom": self.classroom,
            "date": self.session_date.strftime("%Y-%m-%d"),
            "startTime": self.start_time.strftime("%H:%M"),
            "endTime": self.end_time.strftime("%H:%M"),
            "enrolledStudents": list(self.enrolled_student_ids),
            "qrCodeExpiry": self.qr_expires_at.isoformat() if self.qr_expires_at else None,
            "attendanceCount": self.attendance_count,
            "isActive": self.is_active,
        }
