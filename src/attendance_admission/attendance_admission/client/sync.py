from __future__ import annotations

import logging
import threading
from typing import Optional

from .submitter import AttendanceSubmitter

logger = logging.getLogger(__name__)


class SyncWorker:
    """Background loop that replays the offline queue.

    Runs `flush()` every `interval` seconds and right away on `trigger()`
    (e.g. app returns to foreground or connectivity is restored). Stopping
    does not cancel an attempt already in flight.
    """

    def __init__(self, submitter: AttendanceSubmitter, *, interval: float = 60.0):
        self._submitter = submitter
        self._interval = interval
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="attendance-sync", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        self._wake.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        self._thread = None

    def trigger(self) -> None:
        self._wake.set()

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self._submitter.flush()
            except Exception:
                logger.exception("Offline sync pass failed")
            self._wake.wait(self._interval)
            self._wake.clear()
