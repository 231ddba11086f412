from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

Embedding = Tuple[float, ...]


@dataclass(frozen=True)
class BoundingBox:
    left: float
    top: float
    width: float
    height: float

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2


@dataclass(frozen=True)
class FrameSize:
    width: float
    height: float


@dataclass(frozen=True)
class FaceObservation:
    """Một khuôn mặt do bộ phát hiện trả về cho một khung hình.

    Góc Euler tính bằng độ; xác suất mở mắt có thể thiếu (None) tuỳ thiết bị.
    """

    box: BoundingBox
    yaw: float = 0.0
    roll: float = 0.0
    left_eye_open: Optional[float] = None
    right_eye_open: Optional[float] = None


@dataclass(frozen=True)
class FaceProfile:
    user_id: str
    embeddings: Tuple[Embedding, ...]

    @property
    def pose_count(self) -> int:
        return len(self.embeddings)


class AlignmentStatus(str, Enum):
    NO_FACE = "no_face"
    MULTIPLE_FACES = "multiple_faces"
    SINGLE_FACE = "single_face"


class AlignmentInstruction(str, Enum):
    MOVE_CLOSER = "MOVE_CLOSER"
    MOVE_BACK = "MOVE_BACK"
    CENTER_FACE = "CENTER_FACE"
    LOOK_STRAIGHT = "LOOK_STRAIGHT"
    HOLD_STILL = "HOLD_STILL"


class LivenessState(str, Enum):
    START = "start"
    EYES_OPEN_SEEN = "eyes_open_seen"
    BLINK_SEEN = "blink_seen"
    VERIFIED = "verified"
