from __future__ import annotations

import logging
import threading
from typing import Dict, Protocol

from ..core.enums import Capability, CapabilityStatus

logger = logging.getLogger(__name__)


class CapabilityPlatform(Protocol):
    """Hệ điều hành / thiết bị cung cấp quyền camera, vị trí."""

    def status(self, kind: Capability) -> CapabilityStatus:
        raise NotImplementedError

    def request(self, kind: Capability) -> CapabilityStatus:
        raise NotImplementedError


class PermissionArbiter:
    """Serialises capability requests so one prompt is shown per kind.

    A caller that finds a request already in flight for the same kind waits
    up to `wait_seconds` and then reports the current status, whatever it is.
    """

    def __init__(self, platform: CapabilityPlatform, *, wait_seconds: float = 0.5):
        self._platform = platform
        self._wait_seconds = wait_seconds
        self._lock = threading.Lock()
        self._in_flight: Dict[Capability, threading.Event] = {}

    def is_pending(self, kind: Capability) -> bool:
        with self._lock:
            return kind in self._in_flight

    def request_permission(self, kind: Capability) -> CapabilityStatus:
        current = self._platform.status(kind)
        if current.is_granted:
            return current

        with self._lock:
            pending = self._in_flight.get(kind)
            if pending is None:
                done = threading.Event()
                self._in_flight[kind] = done

        if pending is not None:
            pending.wait(self._wait_seconds)
            return self._platform.status(kind)

        try:
            return self._platform.request(kind)
        except Exception:
            logger.exception("Permission request for %s failed", kind.value)
            return self._platform.status(kind)
        finally:
            with self._lock:
                self._in_flight.pop(kind, None)
            done.set()
