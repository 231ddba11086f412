from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..core.constants import EARTH_RADIUS_KM
from ..policy.model import AdmissionPolicy, Coordinate


def haversine_meters(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates, in metres."""

    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c * 1000


@dataclass(frozen=True)
class GeoCheck:
    passed: bool
    distance_meters: Optional[float]
    radius_meters: float
    skipped: bool = False


class GeoFence:
    """Vòng tròn cho phép quanh văn phòng.

    Khi chưa cấu hình toạ độ văn phòng thì geofence bị bỏ qua (luôn đạt).
    """

    def check(self, device: Coordinate, policy: AdmissionPolicy) -> GeoCheck:
        if policy.office is None:
            return GeoCheck(passed=True, distance_meters=None, radius_meters=policy.radius_meters, skipped=True)

        distance = haversine_meters(policy.office, device)
        return GeoCheck(
            passed=distance <= policy.radius_meters,
            distance_meters=distance,
            radius_meters=policy.radius_meters,
        )
