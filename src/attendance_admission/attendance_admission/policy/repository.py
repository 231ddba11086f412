from __future__ import annotations

from typing import Any, Mapping, Protocol


class SettingsRepository(Protocol):
    """Read side of the external key/value configuration store."""

    def get_all(self) -> Mapping[str, Any]:
        raise NotImplementedError
