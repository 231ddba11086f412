from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CheckFlag, ProofMethod
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def create_checkin(
        self,
        *,
        user_id: str,
        check_in_time: datetime,
        verification_method: ProofMethod,
        location_lat: Optional[float] = None,
        location_lng: Optional[float] = None,
        wifi_ssid: Optional[str] = None,
        wifi_bssid: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def find_latest_open(self, user_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def close_if_open(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        total_minutes: int,
        location_flag: CheckFlag,
        wifi_flag: CheckFlag,
    ) -> bool:
        """Set check-out only while the record is still open; False when it was not."""
        raise NotImplementedError

    def get_recent_for_user(self, user_id: str, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
