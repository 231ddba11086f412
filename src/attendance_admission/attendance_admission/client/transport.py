from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from ..core.exceptions import TransportError
from .model import ServerReply

logger = logging.getLogger(__name__)


class AdmissionClient:
    """HTTP client cho máy chủ chấm công (`GET /ping`, `POST /verify`).

    Every call is bounded by a timeout; connection problems surface as
    TransportError so callers can queue the event instead.
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Callable[[], Optional[str]],
        *,
        session: Optional[requests.Session] = None,
        probe_timeout: float = 3.0,
        submit_timeout: float = 10.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._session = session or requests.Session()
        self._probe_timeout = probe_timeout
        self._submit_timeout = submit_timeout

    def _headers(self) -> Dict[str, str]:
        token = self._token_provider()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def ping(self) -> bool:
        try:
            response = self._session.get(
                f"{self._base_url}/ping", headers=self._headers(), timeout=self._probe_timeout
            )
        except requests.RequestException as e:
            logger.info("Admission server unreachable: %s", e)
            return False
        # 401 still proves the server is up; /verify will report it
        return response.status_code < 500

    def verify(self, payload: Mapping[str, Any]) -> ServerReply:
        try:
            response = self._session.post(
                f"{self._base_url}/verify",
                json=dict(payload),
                headers=self._headers(),
                timeout=self._submit_timeout,
            )
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return ServerReply(status_code=response.status_code, body=body)
