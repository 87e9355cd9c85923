from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Credential:
    """Mã QR dùng một lần của một buổi học.

    Immutable; a reissue supersedes it rather than mutating it.
    """

    session_id: int
    token: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class IssuedCredential:
    credential: Credential
    payload: str
    qr_code: str  # data:image/png;base64,...

    def to_dict(self) -> dict:
        return {
            "sessionId": self.credential.session_id,
            "qrCode": self.qr_code,
            "expiryTime": self.credential.expires_at.isoformat(),
        }
