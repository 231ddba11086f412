from __future__ import annotations

import logging
from typing import Optional

from ..core.constants import BLINK_EYE_THRESHOLD, EYES_OPEN_THRESHOLD, EYES_REOPEN_THRESHOLD
from .model import FaceObservation, LivenessState

logger = logging.getLogger(__name__)


def _probability(value: Optional[float]) -> float:
    # Detectors that cannot classify eyes report nothing; treat as open
    return 1.0 if value is None else float(value)


def eye_open_score(face: FaceObservation) -> float:
    return (_probability(face.left_eye_open) + _probability(face.right_eye_open)) / 2


def is_blink(face: FaceObservation) -> bool:
    return (
        _probability(face.left_eye_open) < BLINK_EYE_THRESHOLD
        and _probability(face.right_eye_open) < BLINK_EYE_THRESHOLD
    )


class LivenessGate:
    """Blink-based liveness for one capture session.

    START -> EYES_OPEN_SEEN (score > 0.8) -> BLINK_SEEN (both eyes < 0.3)
    -> VERIFIED (a later frame with score > 0.7). VERIFIED is sticky until
    `reset()`.
    """

    def __init__(self) -> None:
        self._state = LivenessState.START

    @property
    def state(self) -> LivenessState:
        return self._state

    @property
    def is_verified(self) -> bool:
        return self._state == LivenessState.VERIFIED

    def reset(self) -> None:
        self._state = LivenessState.START

    def observe(self, face: FaceObservation) -> LivenessState:
        score = eye_open_score(face)
        previous = self._state

        if self._state == LivenessState.START:
            if score > EYES_OPEN_THRESHOLD:
                self._state = LivenessState.EYES_OPEN_SEEN
        elif self._state == LivenessState.EYES_OPEN_SEEN:
            if is_blink(face):
                self._state = LivenessState.BLINK_SEEN
        elif self._state == LivenessState.BLINK_SEEN:
            if score > EYES_REOPEN_THRESHOLD:
                self._state = LivenessState.VERIFIED

        if self._state != previous:
            logger.debug("Liveness %s -> %s (score=%.2f)", previous.value, self._state.value, score)
        return self._state
