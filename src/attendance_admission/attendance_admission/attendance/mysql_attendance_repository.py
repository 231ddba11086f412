from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import as_utc, to_db
from ..core.enums import AttendanceStatus, CheckFlag, ProofMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, check_in_time, check_out_time, total_minutes, status,
    location_lat, location_lng, wifi_ssid, wifi_bssid, verification_method,
    location_flag, wifi_flag
"""


def _flag(value: Optional[str]) -> Optional[CheckFlag]:
    return CheckFlag(value) if value else None


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    check_out = r.get("check_out_time")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=str(r["user_id"]),
        check_in_time=as_utc(r["check_in_time"]),
        check_out_time=as_utc(check_out) if check_out else None,
        total_minutes=int(r.get("total_minutes") or 0),
        status=AttendanceStatus(r["status"]),
        location_lat=r.get("location_lat"),
        location_lng=r.get("location_lng"),
        wifi_ssid=r.get("wifi_ssid"),
        wifi_bssid=r.get("wifi_bssid"),
        verification_method=ProofMethod(r["verification_method"]),
        location_flag=_flag(r.get("location_flag")),
        wifi_flag=_flag(r.get("wifi_flag")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    user_id, check_in_time, status, location_lat, location_lng,
                    wifi_ssid, wifi_bssid, verification_method
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user_id,
                    to_db(check_in_time),
                    AttendanceStatus.PRESENT.value,
                    location_lat,
                    location_lng,
                    wifi_ssid,
                    wifi_bssid,
                    verification_method.value,
                ),
            )
            return int(cur.lastrowid)

    def find_latest_open(self, user_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND check_out_time IS NULL
                ORDER BY check_in_time DESC
                LIMIT 1
                """,
                (user_id,),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def close_if_open(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        total_minutes: int,
        location_flag: CheckFlag,
        wifi_flag: CheckFlag,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, total_minutes=%s, status=%s, location_flag=%s, wifi_flag=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (
                    to_db(check_out_time),
                    int(total_minutes),
                    AttendanceStatus.PRESENT.value,
                    location_flag.value,
                    wifi_flag.value,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def get_recent_for_user(self, user_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s
                ORDER BY check_in_time DESC
                LIMIT %s
                """,
                (user_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]
