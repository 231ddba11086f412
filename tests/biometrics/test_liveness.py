from __future__ import annotations

import pytest

from src.attendance_admission.attendance_admission.biometrics.liveness import LivenessGate, eye_open_score, is_blink
from src.attendance_admission.attendance_admission.biometrics.model import (
    BoundingBox,
    FaceObservation,
    LivenessState,
)

BOX = BoundingBox(left=0, top=0, width=100, height=100)


def eyes(left, right) -> FaceObservation:
    return FaceObservation(box=BOX, left_eye_open=left, right_eye_open=right)


def test_missing_eye_probability_counts_as_open():
    assert eye_open_score(eyes(None, None)) == 1.0
    assert eye_open_score(eyes(0.2, None)) == pytest.approx(0.6)
    assert not is_blink(eyes(0.1, None))


def test_open_blink_reopen_verifies():
    gate = LivenessGate()

    assert gate.observe(eyes(0.9, 0.95)) == LivenessState.EYES_OPEN_SEEN
    assert gate.observe(eyes(0.1, 0.2)) == LivenessState.BLINK_SEEN
    assert gate.observe(eyes(0.75, 0.8)) == LivenessState.VERIFIED
    assert gate.is_verified


def test_blink_before_open_baseline_is_ignored():
    gate = LivenessGate()

    gate.observe(eyes(0.1, 0.1))
    gate.observe(eyes(0.75, 0.75))

    assert gate.state == LivenessState.START


def test_one_eye_closed_is_not_a_blink():
    gate = LivenessGate()
    gate.observe(eyes(0.9, 0.9))

    gate.observe(eyes(0.1, 0.9))

    assert gate.state == LivenessState.EYES_OPEN_SEEN


def test_verified_is_sticky_until_reset():
    gate = LivenessGate()
    for f in (eyes(0.9, 0.9), eyes(0.1, 0.1), eyes(0.9, 0.9)):
        gate.observe(f)

    gate.observe(eyes(0.0, 0.0))
    assert gate.is_verified

    gate.reset()
    assert gate.state == LivenessState.START
