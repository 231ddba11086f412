from __future__ import annotations

import json
import logging
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

from ..common.datetime_utils import as_utc, now_utc, parse_iso
from ..core.enums import QueueState
from ..core.exceptions import ValidationError
from .model import QueuedEvent

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS pending_attendance (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    idempotency_key TEXT NOT NULL UNIQUE,
    user_id TEXT NOT NULL,
    event_type TEXT NOT NULL,
    payload TEXT NOT NULL,
    created_at TEXT NOT NULL,
    retry_count INTEGER NOT NULL DEFAULT 0,
    last_attempt_at TEXT NULL,
    last_error TEXT NULL,
    next_attempt_at TEXT NOT NULL,
    state TEXT NOT NULL DEFAULT 'pending'
)
"""


def _iso(value: datetime) -> str:
    # Fixed width so ISO strings sort chronologically in SQL
    return as_utc(value).isoformat(timespec="microseconds")


def _opt_time(value: Optional[str]) -> Optional[datetime]:
    return parse_iso(value) if value else None


class OfflineQueue:
    """Hàng đợi bền vững (sqlite3) cho các sự kiện chấm công chưa gửi được.

    Entries keep the exact payload that would have been posted, including a
    client-generated idempotency key, and leave the table only once the
    server has confirmed them.
    """

    def __init__(self, path: Union[str, Path], *, clock: Callable[[], datetime] = now_utc):
        self._path = str(path)
        self._clock = clock
        self._lock = threading.Lock()
        with self._connect() as conn:
            conn.execute(_SCHEMA)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @staticmethod
    def _to_event(r: sqlite3.Row) -> QueuedEvent:
        return QueuedEvent(
            entry_id=int(r["id"]),
            idempotency_key=r["idempotency_key"],
            user_id=r["user_id"],
            event_type=r["event_type"],
            payload=json.loads(r["payload"]),
            enqueued_at=parse_iso(r["created_at"]),
            attempts=int(r["retry_count"]),
            last_attempt_at=_opt_time(r["last_attempt_at"]),
            last_error=r["last_error"],
            next_attempt_at=_opt_time(r["next_attempt_at"]),
            state=QueueState(r["state"]),
        )

    def enqueue(self, payload: Mapping[str, Any]) -> QueuedEvent:
        body: Dict[str, Any] = dict(payload)
        if not body.get("user_id") or not body.get("type"):
            raise ValidationError("Queued payload needs user_id and type")
        body.setdefault("idempotency_key", str(uuid.uuid4()))

        now = _iso(self._clock())
        with self._lock, self._connect() as conn:
            cur = conn.execute(
                """
                INSERT INTO pending_attendance(
                    idempotency_key, user_id, event_type, payload, created_at, next_attempt_at
                )
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (body["idempotency_key"], str(body["user_id"]), body["type"], json.dumps(body), now, now),
            )
            entry_id = int(cur.lastrowid)
        logger.info("Queued %s for user %s (entry %d)", body["type"], body["user_id"], entry_id)
        return self.get(entry_id)

    def get(self, entry_id: int) -> Optional[QueuedEvent]:
        with self._connect() as conn:
            r = conn.execute("SELECT * FROM pending_attendance WHERE id = ?", (entry_id,)).fetchone()
        return self._to_event(r) if r else None

    def pending_count(self) -> int:
        with self._connect() as conn:
            (count,) = conn.execute(
                "SELECT COUNT(*) FROM pending_attendance WHERE state = ?", (QueueState.PENDING.value,)
            ).fetchone()
        return int(count)

    def due(self, now: Optional[datetime] = None) -> List[QueuedEvent]:
        """Pending entries whose next attempt is due, oldest first.

        An entry still backing off holds back every later entry of the same
        user, so a check-out is never sent ahead of its check-in.
        """

        at = as_utc(now or self._clock())
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM pending_attendance WHERE state = ? ORDER BY created_at ASC, id ASC",
                (QueueState.PENDING.value,),
            ).fetchall()

        ready: List[QueuedEvent] = []
        held = set()
        for r in rows:
            event = self._to_event(r)
            if event.user_id in held:
                continue
            if event.next_attempt_at is not None and event.next_attempt_at > at:
                held.add(event.user_id)
                continue
            ready.append(event)
        return ready

    def list_failed(self) -> List[QueuedEvent]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM pending_attendance WHERE state = ? ORDER BY created_at ASC, id ASC",
                (QueueState.FAILED.value,),
            ).fetchall()
        return [self._to_event(r) for r in rows]

    def remove(self, entry_id: int) -> None:
        with self._lock, self._connect() as conn:
            conn.execute("DELETE FROM pending_attendance WHERE id = ?", (entry_id,))

    def mark_retry(
        self,
        entry_id: int,
        *,
        error: str,
        next_attempt_at: datetime,
        count_attempt: bool = True,
    ) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                UPDATE pending_attendance
                SET retry_count = retry_count + ?, last_attempt_at = ?, last_error = ?, next_attempt_at = ?
                WHERE id = ?
                """,
                (1 if count_attempt else 0, _iso(self._clock()), error, _iso(next_attempt_at), entry_id),
            )

    def mark_failed(self, entry_id: int, *, error: str) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                UPDATE pending_attendance
                SET state = ?, retry_count = retry_count + 1, last_attempt_at = ?, last_error = ?
                WHERE id = ?
                """,
                (QueueState.FAILED.value, _iso(self._clock()), error, entry_id),
            )
        logger.warning("Queued entry %d failed permanently: %s", entry_id, error)

    def discard_failed(self, entry_id: int) -> None:
        """Drop a failed entry once the user has acknowledged it."""
        with self._lock, self._connect() as conn:
            conn.execute(
                "DELETE FROM pending_attendance WHERE id = ? AND state = ?",
                (entry_id, QueueState.FAILED.value),
            )
