from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from ..common.datetime_utils import elapsed_minutes, format_duration, now_utc
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AdmissionError, CheckFlag, ProofMethod
from ..core.exceptions import AdmissionRejected
from ..policy.model import Coordinate
from .model import AttendanceRecord, CheckoutResult, HistoryItem
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceStateMachine:
    """Use case: mở / đóng phiên chấm công.

    Business rules:
    - Check-in always opens a new record with a snapshot of location, Wi-Fi
      and proof method. Geofence / Wi-Fi failures are hard blocks enforced by
      the caller before this point.
    - Check-out closes the open record with the latest check-in time.
      Geofence / Wi-Fi failures are only recorded as flags.
    - The close is a conditional update; losing a race to a concurrent
      check-out is reported as NO_ACTIVE_SESSION.
    """

    def __init__(self, attendance: AttendanceRepository, *, reject_duplicate_checkin: bool = False):
        self._attendance = attendance
        self._reject_duplicate_checkin = reject_duplicate_checkin

    def check_in(
        self,
        *,
        user_id: str,
        method: ProofMethod,
        location: Optional[Coordinate] = None,
        wifi_ssid: Optional[str] = None,
        wifi_bssid: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_utc()

        open_record = self._attendance.find_latest_open(user_id)
        if open_record is not None:
            if self._reject_duplicate_checkin:
                raise AdmissionRejected(AdmissionError.ALREADY_CHECKED_IN, "Already checked in")
            logger.warning(
                "User %s checks in while record %s is still open", user_id, open_record.attendance_id
            )

        attendance_id = self._attendance.create_checkin(
            user_id=user_id,
            check_in_time=now,
            verification_method=method,
            location_lat=location.lat if location else None,
            location_lng=location.lng if location else None,
            wifi_ssid=wifi_ssid,
            wifi_bssid=wifi_bssid,
        )
        return AttendanceRecord(
            attendance_id=attendance_id,
            user_id=user_id,
            check_in_time=now,
            check_out_time=None,
            verification_method=method,
            location_lat=location.lat if location else None,
            location_lng=location.lng if location else None,
            wifi_ssid=wifi_ssid,
            wifi_bssid=wifi_bssid,
        )

    def check_out(
        self,
        *,
        user_id: str,
        location_passed: bool = True,
        wifi_passed: bool = True,
        now: Optional[datetime] = None,
    ) -> CheckoutResult:
        now = now or now_utc()

        record = self._attendance.find_latest_open(user_id)
        if record is None:
            raise AdmissionRejected(AdmissionError.NO_ACTIVE_SESSION, "No active check-in found")

        total = elapsed_minutes(record.check_in_time, now)
        location_flag = CheckFlag.VALID if location_passed else CheckFlag.OUTSIDE_RADIUS
        wifi_flag = CheckFlag.VALID if wifi_passed else CheckFlag.UNAUTHORIZED

        closed = self._attendance.close_if_open(
            attendance_id=record.attendance_id,
            check_out_time=now,
            total_minutes=total,
            location_flag=location_flag,
            wifi_flag=wifi_flag,
        )
        if not closed:
            logger.warning("Record %s was closed concurrently", record.attendance_id)
            raise AdmissionRejected(AdmissionError.NO_ACTIVE_SESSION, "No active check-in found")

        closed_record = replace(
            record,
            check_out_time=now,
            total_minutes=total,
            location_flag=location_flag,
            wifi_flag=wifi_flag,
        )
        return CheckoutResult(
            record=closed_record, total_minutes=total, location_flag=location_flag, wifi_flag=wifi_flag
        )


class AttendanceHistoryService:
    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def history(self, user_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> List[HistoryItem]:
        return [
            HistoryItem(
                attendance_id=r.attendance_id,
                check_in_time=r.check_in_time,
                check_out_time=r.check_out_time,
                total_minutes=r.total_minutes,
                duration=None if r.is_open else format_duration(r.total_minutes),
                status=r.status,
                verification_method=r.verification_method,
            )
            for r in self._attendance.get_recent_for_user(user_id, limit)
        ]
