from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence

from .model import ClassSession


class SessionRepository(Protocol):
    """Giao diện repository cho ClassSession.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def create(
        self,
        *,
        teacher_id: int,
        subject: str,
        classroom: str,
        session_date: date,
        start_time: time,
        end_time: time,
        enrolled_student_ids: Sequence[int],
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        raise NotImplementedError

    def set_credential(self, *, session_id: int, token: str, expires_at: datetime) -> bool:
        """Overwrite the credential of an active session in a single conditional update.

        Returns False when no active session matched.
        """

        raise NotImplementedError

    def increment_attendance(self, session_id: int) -> bool:
        raise NotImplementedError

    def deactivate(self, session_id: int) -> bool:
        """Mark inactive and clear the credential."""

        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int) -> Sequence[ClassSession]:
        raise NotImplementedError
