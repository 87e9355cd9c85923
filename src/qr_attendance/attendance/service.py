from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.enums import AttendanceStatus, EventName, VerificationMethod
from ..core.exceptions import CredentialExpiredOrInvalidError, DomainError, NotEnrolledError, UnavailableError
from ..credentials.codec import decode_payload
from ..events.broadcaster import EventBroadcaster, channel_for_session
from ..sessions.model import ClassSession
from ..sessions.service import SessionRegistry
from .model import CheckInResult, NewAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _token_matches(session: ClassSession, presented: str, now: datetime) -> bool:
    # A session without an active credential never matches.
    if not session.qr_token or session.qr_expires_at is None:
        return False
    if not secrets.compare_digest(session.qr_token.encode("utf-8"), presented.encode("utf-8")):
        return False
    return now <= session.qr_expires_at


class AttendanceVerifier:
    """Use case: student scans the session QR code to mark attendance.

    Every step before the insert is read-only. Duplicate prevention relies on the
    repository's reject-on-conflict insert, not on a prior existence read.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        attendance: AttendanceRepository,
        events: EventBroadcaster,
    ):
        self._registry = registry
        self._attendance = attendance
        self._events = events

    def verify(
        self,
        raw_payload: str,
        student_id: int,
        *,
        now: Optional[datetime] = None,
        student_name: Optional[str] = None,
    ) -> CheckInResult:
        now = now or now_local()
        # Stored check-in time and its day must agree once MySQL drops fractions.
        check_in = now.replace(microsecond=0)
        student_id = int(student_id)

        try:
            decoded = decode_payload(raw_payload)
            session = self._registry.get_session(decoded.session_id)

            if not _token_matches(session, decoded.token, now):
                raise CredentialExpiredOrInvalidError("Mã QR đã hết hạn hoặc không hợp lệ")

            if not self._registry.is_enrolled(session, student_id):
                raise NotEnrolledError("Bạn không có tên trong danh sách lớp")

            record = self._attendance.create_unique(
                NewAttendance(
                    session_id=session.session_id,
                    student_id=student_id,
                    teacher_id=session.teacher_id,
                    subject=session.subject,
                    location=session.classroom,
                    attend_date=check_in.date(),
                    check_in_time=check_in,
                    status=AttendanceStatus.PRESENT,
                    method=VerificationMethod.QR_CODE,
                    verified=True,
                )
            )
        except DomainError as e:
            logger.info("Attendance rejected for student %s: %s", student_id, e.code)
            raise

        try:
            self._registry.increment_attendance(session.session_id)
        except UnavailableError:
            # The record is committed; the counter is only a display aggregate.
            logger.warning("Attendance counter not incremented for session %s", session.session_id, exc_info=True)

        self._events.publish(
            channel_for_session(session.session_id),
            EventName.ATTENDANCE_COMMITTED,
            {
                "studentId": student_id,
                "studentName": student_name,
                "timestamp": record.check_in_time.isoformat(),
            },
        )
        logger.info("Attendance %s committed: session %s, student %s", record.attendance_id, session.session_id, student_id)

        return CheckInResult(
            attendance_id=record.attendance_id,
            subject=record.subject,
            check_in_time=record.check_in_time,
            status=record.status,
        )
