from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import mysql.connector

from ..attendance.model import AttendanceRecord
from ..attendance.service import AttendanceStateMachine
from ..biometrics.matcher import EmbeddingMatcher
from ..biometrics.repository import FaceProfileRepository
from ..codes.rotating_code import RotatingCodeService
from ..common.datetime_utils import now_utc
from ..core.enums import AdmissionError, EventType, ProofMethod
from ..core.exceptions import AdmissionRejected, ConfigurationError, EmbeddingDimensionError
from ..location.geofence import GeoCheck, GeoFence
from ..network.wifi_admission import WifiAdmission, WifiCheck
from ..notifications.service import AdminNotifier
from ..policy.model import AdmissionPolicy
from ..policy.service import PolicyService
from .model import AdmissionOutcome, AdmissionReceipt, AdmissionRequest
from .repository import ReceiptRepository

logger = logging.getLogger(__name__)


def _record_data(record: AttendanceRecord) -> Dict[str, Any]:
    return {
        "attendance_id": record.attendance_id,
        "user_id": record.user_id,
        "check_in_time": record.check_in_time.isoformat(),
        "status": record.status.value,
        "verification_method": record.verification_method.value,
        "location": (
            {"lat": record.location_lat, "lng": record.location_lng}
            if record.location_lat is not None
            else None
        ),
        "wifi_ssid": record.wifi_ssid,
    }


class AdmissionService:
    """Cổng chấm công: quyết định một sự kiện check-in/check-out có hợp lệ không.

    Order of evaluation:
    1. identity (token subject must equal `user_id`), idempotency replay
    2. policy load (re-read every call)
    3. geofence + Wi-Fi: hard block on check-in, soft flags on check-out
    4. proof: exactly one of embedding / rotating code
    5. state transition, admin notification, receipt

    With an idempotency key the key is reserved before anything is written;
    a concurrent request for the same key gets REQUEST_IN_PROGRESS. Domain,
    configuration and storage failures become an AdmissionOutcome.
    """

    def __init__(
        self,
        *,
        policy: PolicyService,
        state_machine: AttendanceStateMachine,
        profiles: FaceProfileRepository,
        receipts: ReceiptRepository,
        notifier: AdminNotifier,
        matcher: Optional[EmbeddingMatcher] = None,
        codes: Optional[RotatingCodeService] = None,
        geofence: Optional[GeoFence] = None,
        wifi: Optional[WifiAdmission] = None,
    ):
        self._policy = policy
        self._state_machine = state_machine
        self._profiles = profiles
        self._receipts = receipts
        self._notifier = notifier
        self._matcher = matcher or EmbeddingMatcher()
        self._codes = codes or RotatingCodeService()
        self._geofence = geofence or GeoFence()
        self._wifi = wifi or WifiAdmission()

    def verify(
        self,
        request: AdmissionRequest,
        *,
        authenticated_user_id: str,
        now: Optional[datetime] = None,
    ) -> AdmissionOutcome:
        if str(authenticated_user_id) != request.user_id:
            logging.getLogger("security").warning(
                "Token subject %s tried to submit attendance for %s", authenticated_user_id, request.user_id
            )
            return AdmissionOutcome.forbidden("Unauthorized: token does not match user_id")

        try:
            return self._admit_once(request, now=now or now_utc())
        except AdmissionRejected as e:
            logger.warning("Rejected %s for user %s: %s", request.event_type.value, request.user_id, e.error.value)
            return AdmissionOutcome.rejected(e.error, str(e))
        except ConfigurationError as e:
            logger.error("Admission configuration error: %s", e)
            return AdmissionOutcome.rejected(AdmissionError.CONFIG_ERROR, "Attendance settings are invalid")
        except mysql.connector.Error:
            logger.exception("Storage failure while admitting %s for %s", request.event_type.value, request.user_id)
            return AdmissionOutcome.rejected(AdmissionError.STORAGE_ERROR, "Could not record attendance")

    def _admit_once(self, request: AdmissionRequest, *, now: datetime) -> AdmissionOutcome:
        key = request.idempotency_key
        if key is None:
            return self._admit(request, now=now)

        existing = self._receipts.reserve(idempotency_key=key, user_id=request.user_id, event_type=request.event_type)
        if existing is not None:
            return self._replay(existing, request)

        try:
            outcome = self._admit(request, now=now)
        except Exception:
            # Only successful outcomes are kept
            self._receipts.release(key)
            raise

        self._receipts.complete(
            AdmissionReceipt(
                idempotency_key=key,
                user_id=request.user_id,
                event_type=request.event_type,
                status_code=outcome.status_code,
                body=outcome.body,
            )
        )
        return outcome

    def _replay(self, receipt: AdmissionReceipt, request: AdmissionRequest) -> AdmissionOutcome:
        if receipt.user_id != request.user_id or receipt.event_type != request.event_type:
            raise AdmissionRejected(
                AdmissionError.INVALID_REQUEST, "idempotency_key was already used for another event"
            )
        if not receipt.completed:
            raise AdmissionRejected(
                AdmissionError.REQUEST_IN_PROGRESS, "A request with this idempotency_key is still being processed"
            )
        logger.info("Replaying stored result for idempotency key %s", receipt.idempotency_key)
        return receipt.to_outcome()

    def _admit(self, request: AdmissionRequest, *, now: datetime) -> AdmissionOutcome:
        policy = self._policy.current()
        geo = self._check_location(request, policy)
        wifi = self._wifi.check(request.network.ssid, policy)

        if request.event_type == EventType.CHECK_IN:
            if not geo.passed:
                raise AdmissionRejected(AdmissionError.LOCATION_INVALID, self._location_message(geo))
            if not wifi.passed:
                raise AdmissionRejected(
                    AdmissionError.WIFI_INVALID, "Connected Wi-Fi is not on the office allow-list"
                )

        method = self._verify_proof(request, policy, now=now)

        if request.event_type == EventType.CHECK_IN:
            record = self._state_machine.check_in(
                user_id=request.user_id,
                method=method,
                location=request.location,
                wifi_ssid=wifi.ssid,
                wifi_bssid=request.network.bssid,
                now=now,
            )
            logger.info("User %s checked in (record %s, %s)", request.user_id, record.attendance_id, method.value)
            self._notifier.notify(
                EventType.CHECK_IN,
                user_id=request.user_id,
                settings=policy.notifications,
                data={"attendance_id": record.attendance_id, "time": now.isoformat()},
            )
            return AdmissionOutcome.accepted("Check-in successful", data=_record_data(record))

        result = self._state_machine.check_out(
            user_id=request.user_id,
            location_passed=geo.passed,
            wifi_passed=wifi.passed,
            now=now,
        )
        logger.info(
            "User %s checked out after %d minutes (location=%s wifi=%s)",
            request.user_id, result.total_minutes, result.location_flag.value, result.wifi_flag.value,
        )
        self._notifier.notify(
            EventType.CHECK_OUT,
            user_id=request.user_id,
            settings=policy.notifications,
            data={
                "attendance_id": result.record.attendance_id,
                "time": now.isoformat(),
                "total_minutes": result.total_minutes,
            },
        )
        return AdmissionOutcome.accepted(
            "Check-out successful",
            total_minutes=result.total_minutes,
            flags={"location": result.location_flag.value, "wifi": result.wifi_flag.value},
        )

    def _check_location(self, request: AdmissionRequest, policy: AdmissionPolicy) -> GeoCheck:
        if request.location is None:
            if policy.office is None:
                return GeoCheck(passed=True, distance_meters=None, radius_meters=policy.radius_meters, skipped=True)
            return GeoCheck(passed=False, distance_meters=None, radius_meters=policy.radius_meters)
        return self._geofence.check(request.location, policy)

    @staticmethod
    def _location_message(geo: GeoCheck) -> str:
        if geo.distance_meters is None:
            return "Location is required to check in"
        return (
            f"You are {geo.distance_meters:.0f}m from the office "
            f"(allowed {geo.radius_meters:.0f}m)"
        )

    def _verify_proof(self, request: AdmissionRequest, policy: AdmissionPolicy, *, now: datetime) -> ProofMethod:
        if request.face_embedding is not None and request.code is not None:
            raise AdmissionRejected(AdmissionError.INVALID_REQUEST, "Send either face_embedding or code, not both")
        if request.face_embedding is None and request.code is None:
            raise AdmissionRejected(AdmissionError.MISSING_PROOF, "Face embedding or code is required")

        if request.code is not None:
            if not self._codes.verify(request.code, policy.code_secret, policy.code_period_seconds, at=now):
                raise AdmissionRejected(AdmissionError.INVALID_CODE, "Code is invalid or expired")
            return ProofMethod.CODE

        profile = self._profiles.get_for_user(request.user_id)
        if profile is None or not profile.embeddings:
            raise AdmissionRejected(AdmissionError.NO_FACE_PROFILE, "No enrolled face profile for this user")

        try:
            match = self._matcher.match(request.face_embedding, profile.embeddings)
        except EmbeddingDimensionError as e:
            raise AdmissionRejected(AdmissionError.EMBEDDING_MISMATCH, str(e)) from None

        if not match.is_match:
            raise AdmissionRejected(AdmissionError.FACE_MISMATCH, "Face verification failed")
        return ProofMethod.EMBEDDING
