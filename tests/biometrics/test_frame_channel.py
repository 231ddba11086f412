from __future__ import annotations

import threading
import time

from src.attendance_admission.attendance_admission.biometrics.frames import FrameChannel


class ManualClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_frames_offered_while_busy_are_dropped():
    release = threading.Event()
    started = threading.Event()
    seen = []

    def handler(frame):
        seen.append(frame)
        started.set()
        release.wait(2)

    channel = FrameChannel(handler)
    channel.start()
    try:
        assert channel.offer(1)
        assert started.wait(2)
        assert not channel.offer(2)
        assert not channel.offer(3)
        release.set()
    finally:
        channel.stop()

    assert seen == [1]
    assert channel.dropped == 2
    assert channel.accepted == 1


def test_min_interval_drops_frames_that_arrive_too_soon():
    clock = ManualClock()
    done = threading.Event()
    seen = []

    def handler(frame):
        seen.append(frame)
        done.set()

    channel = FrameChannel(handler, min_interval=0.5, clock=clock)
    channel.start()
    try:
        assert channel.offer("a")
        assert done.wait(2)
        # Wait for the consumer to finish so only the interval rule applies
        for _ in range(200):
            if channel.processed == 1 and not channel.busy:
                break
            time.sleep(0.01)
        done.clear()

        clock.now = 0.2
        assert not channel.offer("b")

        clock.now = 0.6
        assert channel.offer("c")
        assert done.wait(2)
    finally:
        channel.stop()

    assert seen == ["a", "c"]
    assert channel.dropped == 1


def test_offer_before_start_does_not_block():
    channel = FrameChannel(lambda frame: None)

    assert channel.offer("x")
    assert not channel.offer("y")
    assert channel.dropped == 1
