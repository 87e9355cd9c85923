"""Wire format of the string carried inside the QR image.

    {"classSessionId": 12, "token": "<32 hex>", "timestamp": 1760000000000}
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from ..common.datetime_utils import to_epoch_millis
from ..core.exceptions import MalformedCredentialError
from .model import Credential


@dataclass(frozen=True)
class DecodedPayload:
    session_id: int
    token: str


def encode_payload(credential: Credential) -> str:
    return json.dumps(
        {
            "classSessionId": credential.session_id,
            "timestamp": to_epoch_millis(credential.issued_at),
            "token": credential.token,
        },
        separators=(",", ":"),
    )


def decode_payload(raw_payload) -> DecodedPayload:
    if not isinstance(raw_payload, str) or not raw_payload.strip():
        raise MalformedCredentialError("Mã QR không hợp lệ")

    try:
        data = json.loads(raw_payload)
    except ValueError:
        raise MalformedCredentialError("Mã QR không đọc được")

    if not isinstance(data, dict):
        raise MalformedCredentialError("Mã QR không hợp lệ")

    session_id = data.get("classSessionId")
    # bool is an int subclass; reject it explicitly.
    if isinstance(session_id, bool):
        raise MalformedCredentialError("Mã QR thiếu mã buổi học")
    if isinstance(session_id, str):
        text = session_id.strip()
        # isdigit() also accepts "²"; only plain ASCII digits are ids.
        session_id = int(text) if text.isascii() and text.isdecimal() else None
    if not isinstance(session_id, int) or session_id <= 0:
        raise MalformedCredentialError("Mã QR thiếu mã buổi học")

    token = data.get("token")
    if not isinstance(token, str) or not token.strip():
        raise MalformedCredentialError("Mã QR thiếu mã xác thực")

    return DecodedPayload(session_id=session_id, token=token.strip())
