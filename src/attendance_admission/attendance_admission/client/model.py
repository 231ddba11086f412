from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from ..biometrics.alignment import AlignmentResult
from ..biometrics.model import LivenessState
from ..core.enums import QueueState


class SubmitStatus(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    QUEUED = "queued"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class ServerReply:
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def error(self) -> Optional[str]:
        return self.body.get("error")

    @property
    def is_terminal_rejection(self) -> bool:
        """A 4xx that an identical payload cannot turn into a success later."""
        return 400 <= self.status_code < 500 and self.status_code not in (401, 408, 409, 429)


@dataclass(frozen=True)
class SubmitResult:
    status: SubmitStatus
    status_code: Optional[int] = None
    body: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    entry_id: Optional[int] = None

    @property
    def queued(self) -> bool:
        return self.status == SubmitStatus.QUEUED


@dataclass(frozen=True)
class QueuedEvent:
    entry_id: int
    idempotency_key: str
    user_id: str
    event_type: str
    payload: Dict[str, Any]
    enqueued_at: datetime
    attempts: int = 0
    last_attempt_at: Optional[datetime] = None
    last_error: Optional[str] = None
    next_attempt_at: Optional[datetime] = None
    state: QueueState = QueueState.PENDING


@dataclass(frozen=True)
class FrameAnalysis:
    """Alignment and liveness for one processed camera frame."""

    alignment: AlignmentResult
    liveness: LivenessState
