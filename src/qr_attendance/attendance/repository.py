from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceReportRow, NewAttendance


class AttendanceRepository(Protocol):
    def create_unique(self, record: NewAttendance) -> AttendanceRecord:
        """Insert one record; reject-on-conflict for (session, student, day).

        Raises AlreadyMarkedError when the uniqueness constraint is hit. Must be
        atomic with respect to concurrent inserts of the same key.
        """

        raise NotImplementedError

    def list_for_student(
        self,
        *,
        student_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        subject: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
