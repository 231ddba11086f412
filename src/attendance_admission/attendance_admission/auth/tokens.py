from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

import jwt

from ..common.datetime_utils import now_utc
from ..core.exceptions import AuthenticationError

security_logger = logging.getLogger("security")


class TokenService:
    """Bearer token (JWT) dùng cho API chấm công; `sub` là user_id."""

    def __init__(self, secret: str, *, algorithm: str = "HS256", ttl_minutes: int = 60 * 12):
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(minutes=ttl_minutes)

    def issue(self, user_id: str) -> str:
        now = now_utc()
        return jwt.encode(
            {"sub": str(user_id), "iat": now, "exp": now + self._ttl},
            self._secret,
            algorithm=self._algorithm,
        )

    def verify(self, token: Optional[str]) -> str:
        """Return the token subject, or raise AuthenticationError."""

        if not token:
            raise AuthenticationError("Missing bearer token")
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            security_logger.warning("Rejected expired bearer token")
            raise AuthenticationError("Token has expired") from None
        except jwt.InvalidTokenError as e:
            security_logger.warning("Rejected invalid bearer token: %s", e)
            raise AuthenticationError("Invalid token") from None

        subject = claims.get("sub")
        if not subject:
            raise AuthenticationError("Token has no subject")
        return str(subject)


def bearer_token(authorization_header: Optional[str]) -> Optional[str]:
    if not authorization_header:
        return None
    scheme, _, value = authorization_header.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()
