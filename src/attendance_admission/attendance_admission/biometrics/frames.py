from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class FrameChannel:
    """Single-consumer frame channel with drop-on-busy backpressure.

    The camera thread calls `offer()` for every frame. At most one frame is
    in flight; frames arriving while the consumer is busy or sooner than
    `min_interval` seconds after the last accepted frame are dropped and
    counted, never queued.
    """

    def __init__(
        self,
        handler: Callable[[Any], None],
        *,
        min_interval: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._handler = handler
        self._min_interval = float(min_interval)
        self._clock = clock

        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=1)
        self._lock = threading.Lock()
        self._busy = False
        self._last_accepted: Optional[float] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.accepted = 0
        self.dropped = 0
        self.processed = 0

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._busy

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._consume, name="frame-consumer", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        self._thread = None

    def offer(self, frame: Any) -> bool:
        """Hand a frame to the consumer. Returns False when it was dropped."""

        with self._lock:
            now = self._clock()
            too_soon = (
                self._last_accepted is not None and now - self._last_accepted < self._min_interval
            )
            if self._busy or too_soon:
                self.dropped += 1
                return False
            try:
                self._queue.put_nowait(frame)
            except queue.Full:
                self.dropped += 1
                return False
            self._busy = True
            self._last_accepted = now
            self.accepted += 1
            return True

    def _consume(self) -> None:
        while not self._stop.is_set():
            try:
                frame = self._queue.get(timeout=0.1)
            except queue.Empty:
                continue
            try:
                self._handler(frame)
                self.processed += 1
            except Exception:
                logger.exception("Frame handler failed")
            finally:
                with self._lock:
                    self._busy = False
