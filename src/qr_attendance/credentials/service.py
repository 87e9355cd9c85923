from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_QR_TOKEN_TTL_MINUTES, QR_TOKEN_BYTES
from ..core.enums import EventName
from ..core.exceptions import ForbiddenError, SessionInactiveError
from ..events.broadcaster import EventBroadcaster, channel_for_session
from ..sessions.service import SessionRegistry
from .codec import encode_payload
from .model import Credential, IssuedCredential
from .renderer import QRCodeRenderer

logger = logging.getLogger(__name__)


def generate_token() -> str:
    """32 hex chars from the OS CSPRNG."""
    return secrets.token_hex(QR_TOKEN_BYTES)


class CredentialIssuer:
    """Use case: teacher generates the attendance QR code of a class session.

    The only writer of a session's credential. Reissuing overwrites the previous
    credential, so the old QR code stops working immediately even if unexpired.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        events: EventBroadcaster,
        *,
        renderer: Optional[QRCodeRenderer] = None,
        ttl_minutes: int = DEFAULT_QR_TOKEN_TTL_MINUTES,
    ):
        if int(ttl_minutes) <= 0:
            raise ValueError("ttl_minutes must be positive")
        self._registry = registry
        self._events = events
        self._renderer = renderer or QRCodeRenderer()
        self._ttl = timedelta(minutes=int(ttl_minutes))

    def issue(self, session_id: int, teacher_id: int, *, now: Optional[datetime] = None) -> IssuedCredential:
        # DATETIME columns keep whole seconds; the stored expiry must equal the returned one.
        now = (now or now_local()).replace(microsecond=0)

        session = self._registry.get_session(session_id)
        if session.teacher_id != int(teacher_id):
            raise ForbiddenError("Bạn không có quyền tạo mã QR cho buổi học này")
        if not session.is_active:
            raise SessionInactiveError("Buổi học đã kết thúc")

        credential = Credential(
            session_id=session.session_id,
            token=generate_token(),
            issued_at=now,
            expires_at=now + self._ttl,
        )
        self._registry.set_credential(session.session_id, credential.token, credential.expires_at)

        payload = encode_payload(credential)
        issued = IssuedCredential(
            credential=credential,
            payload=payload,
            qr_code=self._renderer.render_data_url(payload),
        )

        self._events.publish(
            channel_for_session(session.session_id),
            EventName.CREDENTIAL_ISSUED,
            issued.to_dict(),
        )
        logger.info(
            "QR credential issued for session %s (token %s..., expires %s)",
            session.session_id,
            credential.token[:6],
            credential.expires_at.isoformat(),
        )
        return issued
