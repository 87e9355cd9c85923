from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Iterable, Sequence

from ..common.validators import require_non_empty, require_positive_int, unique_ids
from ..core.exceptions import ForbiddenError, SessionNotFoundError, ValidationError
from .model import ClassSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns the class session lifecycle.

    Credential and counter writes assume the caller already checked authorization.
    """

    def __init__(self, sessions: SessionRepository):
        self._sessions = sessions

    def create_session(
        self,
        *,
        teacher_id: int,
        subject: str,
        classroom: str,
        session_date: date,
        start_time: time,
        end_time: time,
        enrolled_student_ids: Iterable[int] = (),
    ) -> ClassSession:
        teacher_id = require_positive_int(teacher_id, "Giảng viên")
        subject = require_non_empty(subject, "Môn học")
        classroom = require_non_empty(classroom, "Phòng học")
        if start_time >= end_time:
            raise ValidationError("Giờ bắt đầu phải trước giờ kết thúc")
        roster = unique_ids(enrolled_student_ids, "Sinh viên")

        session_id = self._sessions.create(
            teacher_id=teacher_id,
            subject=subject,
            classroom=classroom,
            session_date=session_date,
            start_time=start_time,
            end_time=end_time,
            enrolled_student_ids=roster,
        )
        logger.info("Class session %s created by teacher %s (%d enrolled)", session_id, teacher_id, len(roster))
        return self.get_session(session_id)

    def get_session(self, session_id: int) -> ClassSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise SessionNotFoundError("Không tìm thấy buổi học")
        return session

    @staticmethod
    def is_enrolled(session: ClassSession, student_id: int) -> bool:
        return int(student_id) in session.enrolled_student_ids

    def set_credential(self, session_id: int, token: str, expires_at: datetime) -> None:
        if not self._sessions.set_credential(session_id=int(session_id), token=token, expires_at=expires_at):
            raise SessionNotFoundError("Không tìm thấy buổi học đang hoạt động")

    def increment_attendance(self, session_id: int) -> None:
        self._sessions.increment_attendance(int(session_id))

    def deactivate_session(self, session_id: int, *, teacher_id: int) -> ClassSession:
        session = self.get_session(session_id)
        if session.teacher_id != int(teacher_id):
            raise ForbiddenError("Bạn không phụ trách buổi học này")

        self._sessions.deactivate(session.session_id)
        logger.info("Class session %s deactivated", session.session_id)
        return self.get_session(session.session_id)

    def list_for_teacher(self, teacher_id: int) -> Sequence[ClassSession]:
        return self._sessions.list_for_teacher(int(teacher_id))
