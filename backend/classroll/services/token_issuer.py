"""Attendance token generation and QR rendering."""
import base64
import io
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

import qrcode

from classroll.exceptions import ValidationError

# 32 random bytes -> 43 url-safe characters, 256 bits of entropy
TOKEN_BYTES = 32

@dataclass(frozen=True)
class Token:
    """A time-boxed credential bound to one session."""
    value: str
    session_id: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

class TokenIssuer:
    """Issues unguessable session tokens.

    Pure value construction: the issuer never touches the session row, the
    session controller installs the token through the registry.
    """

    def __init__(self, nbytes: int = TOKEN_BYTES):
        if nbytes < 16:
            raise ValueError("Tokens need at least 128 bits of entropy")
        self.nbytes = nbytes

    def issue(self, session_id: str, ttl: timedelta, now: datetime) -> Token:
        if ttl <= timedelta(0):
            raise ValidationError("Token lifetime must be positive")

        return Token(
            value=secrets.token_urlsafe(self.nbytes),
            session_id=session_id,
            expires_at=now + ttl
        )

    @staticmethod
    def render_qr(value: str, box_size: int = 10, border: int = 4) -> str:
        """Render ``value`` as a PNG QR code data URL."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            box_size=box_size,
            border=border,
        )
        qr.add_data(value)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return f"data:image/png;base64,{img_str}"
