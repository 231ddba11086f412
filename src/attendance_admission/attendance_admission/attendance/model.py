from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, CheckFlag, ProofMethod


@dataclass(frozen=True)
class AttendanceRecord:
    attendance_id: int
    user_id: str
    check_in_time: datetime
    check_out_time: Optional[datetime]
    verification_method: ProofMethod
    total_minutes: int = 0
    status: AttendanceStatus = AttendanceStatus.PRESENT
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None
    wifi_ssid: Optional[str] = None
    wifi_bssid: Optional[str] = None
    location_flag: Optional[CheckFlag] = None
    wifi_flag: Optional[CheckFlag] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None


@dataclass(frozen=True)
class CheckoutResult:
    record: AttendanceRecord
    total_minutes: int
    location_flag: CheckFlag
    wifi_flag: CheckFlag


@dataclass(frozen=True)
class HistoryItem:
    """Dòng lịch sử chấm công đã định dạng để hiển thị."""

    attendance_id: int
    check_in_time: datetime
    check_out_time: Optional[datetime]
    total_minutes: int
    duration: Optional[str]
    status: AttendanceStatus
    verification_method: ProofMethod
