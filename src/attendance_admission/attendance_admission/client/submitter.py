from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional

from ..common.datetime_utils import as_utc, now_utc
from ..core.exceptions import TransportError
from .model import QueuedEvent, ServerReply, SubmitResult, SubmitStatus
from .offline_queue import OfflineQueue
from .settings import ClientSettings
from .transport import AdmissionClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlushReport:
    reachable: bool
    sent: int = 0
    retried: int = 0
    failed: int = 0
    skipped: bool = False


def backoff_delay(attempts: int, *, base: float, cap: float) -> timedelta:
    """Exponential delay after `attempts` failed tries (1 -> base)."""
    exponent = max(0, attempts - 1)
    return timedelta(seconds=min(cap, base * (2 ** min(exponent, 32))))


class AttendanceSubmitter:
    """Gửi sự kiện chấm công; khi mất mạng thì lưu vào hàng đợi offline.

    `submit_attendance` never blocks on retries: it either returns the server
    decision or `queued`. `flush` replays due entries through the same
    `POST /verify` contract with their stored payload untouched.
    """

    def __init__(
        self,
        client: AdmissionClient,
        queue: OfflineQueue,
        *,
        settings: Optional[ClientSettings] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._client = client
        self._queue = queue
        self._settings = settings or ClientSettings()
        self._clock = clock
        self._flush_lock = threading.Lock()

    def submit_attendance(self, event: Mapping[str, Any]) -> SubmitResult:
        payload: Dict[str, Any] = dict(event)
        payload.setdefault("idempotency_key", str(uuid.uuid4()))

        if not self._client.ping():
            return self._enqueue(payload, "server unreachable")

        try:
            reply = self._client.verify(payload)
        except TransportError as e:
            return self._enqueue(payload, str(e))

        if reply.ok:
            return SubmitResult(status=SubmitStatus.ACCEPTED, status_code=reply.status_code, body=reply.body)
        if reply.status_code == 401:
            return SubmitResult(
                status=SubmitStatus.UNAUTHORIZED, status_code=401, body=reply.body, error="UNAUTHORIZED"
            )
        if reply.is_terminal_rejection:
            return SubmitResult(
                status=SubmitStatus.REJECTED, status_code=reply.status_code, body=reply.body, error=reply.error
            )
        return self._enqueue(payload, f"HTTP {reply.status_code}")

    def _enqueue(self, payload: Dict[str, Any], reason: str) -> SubmitResult:
        entry = self._queue.enqueue(payload)
        logger.info("Attendance queued for later (%s)", reason)
        return SubmitResult(status=SubmitStatus.QUEUED, entry_id=entry.entry_id)

    def flush(self, now: Optional[datetime] = None) -> FlushReport:
        if not self._flush_lock.acquire(blocking=False):
            return FlushReport(reachable=True, skipped=True)
        try:
            return self._flush(now or self._clock())
        finally:
            self._flush_lock.release()

    def _flush(self, now: datetime) -> FlushReport:
        due = self._queue.due(now)
        if not due:
            return FlushReport(reachable=True)

        max_age = timedelta(seconds=self._settings.max_age_seconds)
        live = []
        failed = 0
        for entry in due:
            if as_utc(now) - entry.enqueued_at > max_age:
                self._queue.mark_failed(entry.entry_id, error="expired")
                failed += 1
            else:
                live.append(entry)

        if not live:
            return FlushReport(reachable=True, failed=failed)
        if not self._client.ping():
            return FlushReport(reachable=False, failed=failed)

        sent = retried = 0
        for entry in live:
            try:
                reply = self._client.verify(entry.payload)
            except TransportError as e:
                outcome = "retried" if self._retry_or_fail(entry, str(e), now) else "failed"
            else:
                outcome = self._apply(entry, reply, now)

            if outcome == "sent":
                sent += 1
            elif outcome == "failed":
                failed += 1
            else:
                retried += 1
                # Later entries wait for this one so replay keeps enqueue order
                break

        logger.info("Offline sync: sent=%d retried=%d failed=%d", sent, retried, failed)
        return FlushReport(reachable=True, sent=sent, retried=retried, failed=failed)

    def _apply(self, entry: QueuedEvent, reply: ServerReply, now: datetime) -> str:
        if reply.ok:
            self._queue.remove(entry.entry_id)
            return "sent"
        if reply.status_code == 401:
            # Needs a fresh token, not a new attempt
            self._queue.mark_retry(
                entry.entry_id,
                error="UNAUTHORIZED",
                next_attempt_at=now + timedelta(seconds=self._settings.backoff_base_seconds),
                count_attempt=False,
            )
            return "retried"
        if reply.is_terminal_rejection:
            self._queue.mark_failed(entry.entry_id, error=reply.error or f"HTTP {reply.status_code}")
            return "failed"
        return "retried" if self._retry_or_fail(entry, f"HTTP {reply.status_code}", now) else "failed"

    def _retry_or_fail(self, entry: QueuedEvent, error: str, now: datetime) -> bool:
        attempts = entry.attempts + 1
        if attempts >= self._settings.max_attempts:
            self._queue.mark_failed(entry.entry_id, error=error)
            return False
        delay = backoff_delay(
            attempts, base=self._settings.backoff_base_seconds, cap=self._settings.backoff_cap_seconds
        )
        self._queue.mark_retry(entry.entry_id, error=error, next_attempt_at=now + delay)
        return True
