from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from ..core.constants import DEFAULT_CODE_PERIOD_SECONDS, DEFAULT_RADIUS_METERS


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(frozen=True)
class NotificationSettings:
    enabled: bool = True
    notify_on_checkin: bool = False
    notify_on_checkout: bool = False


@dataclass(frozen=True)
class AdmissionPolicy:
    """Cấu hình chính sách chấm công, đã kiểm tra kiểu khi nạp.

    `office=None` tắt geofence; allow-list rỗng tắt kiểm tra Wi-Fi.
    """

    office: Optional[Coordinate] = None
    radius_meters: float = DEFAULT_RADIUS_METERS
    wifi_allowlist: FrozenSet[str] = field(default_factory=frozenset)
    code_secret: Optional[str] = None
    code_period_seconds: int = DEFAULT_CODE_PERIOD_SECONDS
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
