from __future__ import annotations

import hashlib
import hmac
import struct
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..common.datetime_utils import as_utc, now_utc
from ..core.constants import CODE_DIGITS
from ..core.exceptions import ConfigurationError


@dataclass(frozen=True)
class RotatingCode:
    code: str
    window: int
    expires_at: datetime


def _window(at: datetime, period: int) -> int:
    return int(as_utc(at).timestamp()) // period


def _code_for_window(secret: str, window: int, digits: int) -> str:
    digest = hmac.new(secret.encode("utf-8"), struct.pack(">Q", window), hashlib.sha256).digest()
    # Dynamic truncation (RFC 4226 section 5.3)
    offset = digest[-1] & 0x0F
    number = struct.unpack(">I", digest[offset:offset + 4])[0] & 0x7FFFFFFF
    return str(number % (10 ** digits)).zfill(digits)


class RotatingCodeService:
    """Mã số thay đổi theo chu kỳ, hiển thị ở quầy (kiosk) để chấm công không cần khuôn mặt.

    Chấp nhận lệch ±`drift` chu kỳ để bù độ trễ quét mã.
    """

    def __init__(self, *, digits: int = CODE_DIGITS, drift: int = 1):
        self._digits = digits
        self._drift = drift

    def issue(self, secret: Optional[str], period: int, *, at: Optional[datetime] = None) -> RotatingCode:
        if not secret:
            raise ConfigurationError("code_secret is not configured")
        at = at or now_utc()
        window = _window(at, period)
        expires_at = datetime.fromtimestamp((window + 1) * period, tz=timezone.utc)
        return RotatingCode(code=_code_for_window(secret, window, self._digits), window=window, expires_at=expires_at)

    def verify(self, code: str, secret: Optional[str], period: int, *, at: Optional[datetime] = None) -> bool:
        if not secret:
            raise ConfigurationError("code_secret is not configured")
        candidate = (code or "").strip()
        if len(candidate) != self._digits or not candidate.isdigit():
            return False

        current = _window(at or now_utc(), period)
        return any(
            hmac.compare_digest(candidate, _code_for_window(secret, current + delta, self._digits))
            for delta in range(-self._drift, self._drift + 1)
        )


def seconds_remaining(code: RotatingCode, *, at: Optional[datetime] = None) -> int:
    remaining: timedelta = code.expires_at - as_utc(at or now_utc())
    return max(0, int(remaining.total_seconds()))
