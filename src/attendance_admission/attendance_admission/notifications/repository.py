from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol


class NotificationRepository(Protocol):
    def create(self, *, type: str, title: str, message: str, data: Optional[Mapping[str, Any]] = None) -> int:
        raise NotImplementedError
