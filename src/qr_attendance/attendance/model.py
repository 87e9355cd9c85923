from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, VerificationMethod


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi điểm danh.

    teacher_id/subject/location are copied from the session at commit time.
    """

    attendance_id: int
    session_id: int
    student_id: int
    teacher_id: int
    subject: str
    location: str
    attend_date: date
    check_in_time: datetime
    status: AttendanceStatus = AttendanceStatus.PRESENT
    method: VerificationMethod = VerificationMethod.QR_CODE
    verified: bool = False


@dataclass(frozen=True)
class NewAttendance:
    session_id: int
    student_id: int
    teacher_id: int
    subject: str
    location: str
    attend_date: date
    check_in_time: datetime
    status: AttendanceStatus
    method: VerificationMethod
    verified: bool


@dataclass(frozen=True)
class CheckInResult:
    attendance_id: int
    subject: str
    check_in_time: datetime
    status: AttendanceStatus

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "subject": self.subject,
            "checkInTime": self.check_in_time.isoformat(),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model phục vụ báo cáo (joined with session and teacher)."""

    attendance_id: int
    session_id: int
    subject: str
    location: str
    teacher_name: Optional[str]
    attend_date: date
    check_in_time: datetime
    start_time: Optional[str]
    end_time: Optional[str]
    status: AttendanceStatus
    method: VerificationMethod
