from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError


@dataclass(frozen=True)
class StudentReport:
    rows: list[dict]
    statistics: dict


class AttendanceReportService:
    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    @staticmethod
    def resolve_student(*, current_user_id: int, current_role: Role, requested_student_id: Optional[int]) -> int:
        """Students only see their own history; teachers/admins pick a student."""
        if current_role == Role.STUDENT:
            if requested_student_id is not None and int(requested_student_id) != int(current_user_id):
                raise AuthorizationError("Bạn chỉ được xem điểm danh của chính mình")
            return int(current_user_id)

        if requested_student_id is None:
            raise ValidationError("Thiếu mã sinh viên")
        return int(requested_student_id)

    def build_student_report(
        self,
        student_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        subject: Optional[str] = None,
    ) -> StudentReport:
        if (start is None) != (end is None):
            raise ValidationError("Cần cả ngày bắt đầu và ngày kết thúc")
        if start and end and start > end:
            raise ValidationError("Khoảng ngày không hợp lệ")

        query_rows = self._attendance.list_for_student(
            student_id=int(student_id),
            start_date=start,
            end_date=end,
            subject=(subject or "").strip() or None,
        )

        rows = [
            {
                "id": r.attendance_id,
                "classSession": {
                    "id": r.session_id,
                    "subject": r.subject,
                    "classroom": r.location,
                    "startTime": r.start_time,
                    "endTime": r.end_time,
                },
                "teacher": r.teacher_name,
                "date": r.attend_date.strftime("%Y-%m-%d"),
                "checkInTime": r.check_in_time.isoformat(),
                "status": r.status.value,
                "method": r.method.value,
            }
            for r in query_rows
        ]

        total = len(query_rows)
        present = sum(1 for r in query_rows if r.status == AttendanceStatus.PRESENT)
        percentage = round(present / total * 100, 2) if total else 0

        return StudentReport(
            rows=rows,
            statistics={
                "totalClasses": total,
                "presentClasses": present,
                "absentClasses": total - present,
                "attendancePercentage": percentage,
            },
        )
