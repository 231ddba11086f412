from __future__ import annotations

import math
import threading
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from src.attendance_admission.attendance_admission.admission.model import AdmissionReceipt
from src.attendance_admission.attendance_admission.attendance.model import AttendanceRecord
from src.attendance_admission.attendance_admission.biometrics.model import FaceProfile
from src.attendance_admission.attendance_admission.core.enums import CheckFlag, ProofMethod


class InMemorySettings:
    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self.values: Dict[str, Any] = dict(values or {})

    def get_all(self) -> Mapping[str, Any]:
        return dict(self.values)


class InMemoryProfiles:
    def __init__(self, profiles: Optional[Dict[str, Sequence[Sequence[float]]]] = None):
        self.profiles: Dict[str, FaceProfile] = {}
        for user_id, embeddings in (profiles or {}).items():
            self.upsert(user_id=user_id, embeddings=embeddings)

    def get_for_user(self, user_id: str) -> Optional[FaceProfile]:
        return self.profiles.get(user_id)

    def upsert(self, *, user_id: str, embeddings) -> None:
        self.profiles[user_id] = FaceProfile(user_id=user_id, embeddings=tuple(tuple(e) for e in embeddings))


class InMemoryAttendance:
    def __init__(self):
        self.records: Dict[int, AttendanceRecord] = {}
        self._id = 0
        # Set to simulate another request closing the record first
        self.lose_next_close = False

    def create_checkin(
        self,
        *,
        user_id: str,
        check_in_time: datetime,
        verification_method: ProofMethod,
        location_lat=None,
        location_lng=None,
        wifi_ssid=None,
        wifi_bssid=None,
    ) -> int:
        self._id += 1
        self.records[self._id] = AttendanceRecord(
            attendance_id=self._id,
            user_id=user_id,
            check_in_time=check_in_time,
            check_out_time=None,
            verification_method=verification_method,
            location_lat=location_lat,
            location_lng=location_lng,
            wifi_ssid=wifi_ssid,
            wifi_bssid=wifi_bssid,
        )
        return self._id

    def find_latest_open(self, user_id: str) -> Optional[AttendanceRecord]:
        open_records = [r for r in self.records.values() if r.user_id == user_id and r.is_open]
        if not open_records:
            return None
        return max(open_records, key=lambda r: r.check_in_time)

    def close_if_open(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        total_minutes: int,
        location_flag: CheckFlag,
        wifi_flag: CheckFlag,
    ) -> bool:
        if self.lose_next_close:
            self.lose_next_close = False
            rec = self.records[attendance_id]
            self.records[attendance_id] = replace(rec, check_out_time=check_out_time)
            return False

        rec = self.records.get(attendance_id)
        if rec is None or not rec.is_open:
            return False
        self.records[attendance_id] = replace(
            rec,
            check_out_time=check_out_time,
            total_minutes=total_minutes,
            location_flag=location_flag,
            wifi_flag=wifi_flag,
        )
        return True

    def get_recent_for_user(self, user_id: str, limit: int) -> Sequence[AttendanceRecord]:
        items = [r for r in self.records.values() if r.user_id == user_id]
        items.sort(key=lambda r: r.check_in_time, reverse=True)
        return items[:limit]


class InMemoryReceipts:
    def __init__(self):
        self.receipts: Dict[str, AdmissionReceipt] = {}
        self._lock = threading.Lock()

    def get(self, idempotency_key: str) -> Optional[AdmissionReceipt]:
        return self.receipts.get(idempotency_key)

    def reserve(self, *, idempotency_key, user_id, event_type) -> Optional[AdmissionReceipt]:
        with self._lock:
            existing = self.receipts.get(idempotency_key)
            if existing is None:
                self.receipts[idempotency_key] = AdmissionReceipt(
                    idempotency_key=idempotency_key, user_id=user_id, event_type=event_type
                )
            return existing

    def complete(self, receipt: AdmissionReceipt) -> None:
        with self._lock:
            self.receipts[receipt.idempotency_key] = receipt

    def release(self, idempotency_key: str) -> None:
        with self._lock:
            current = self.receipts.get(idempotency_key)
            if current is not None and not current.completed:
                del self.receipts[idempotency_key]


class InMemoryNotifications:
    def __init__(self, fail: bool = False):
        self.items: List[Dict[str, Any]] = []
        self.fail = fail

    def create(self, *, type: str, title: str, message: str, data=None) -> int:
        if self.fail:
            raise RuntimeError("notifications table unavailable")
        self.items.append({"type": type, "title": title, "message": message, "data": data})
        return len(self.items)


OFFICE = {"lat": 25.2048, "lng": 55.2708}
METERS_PER_DEGREE_LAT = 6371000.0 * math.pi / 180


def pair_at(distance: float, similarity: float, *, dims: int = 2):
    """Two vectors with the given Euclidean distance and cosine similarity."""

    r = math.sqrt(distance ** 2 / (2 * (1 - similarity)))
    stored = [r, 0.0] + [0.0] * (dims - 2)
    probe = [r * similarity, r * math.sqrt(1 - similarity ** 2)] + [0.0] * (dims - 2)
    return stored, probe


def north_of(point: dict, meters: float) -> dict:
    return {"lat": point["lat"] + meters / METERS_PER_DEGREE_LAT, "lng": point["lng"]}
