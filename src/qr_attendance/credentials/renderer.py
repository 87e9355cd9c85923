from __future__ import annotations

import base64
import io

import qrcode


class QRCodeRenderer:
    """Render payload strings as PNG QR codes."""

    def __init__(self, *, box_size: int = 10, border: int = 2):
        self._box_size = int(box_size)
        self._border = int(border)

    def render_png(self, data: str) -> bytes:
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=self._box_size,
            border=self._border,
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    def render_data_url(self, data: str) -> str:
        encoded = base64.b64encode(self.render_png(data)).decode("ascii")
        return f"data:image/png;base64,{encoded}"
