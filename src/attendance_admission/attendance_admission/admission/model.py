from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple

from ..common.validators import (
    optional_string,
    require_mapping,
    require_non_empty,
    require_number,
    require_vector,
)
from ..core.enums import AdmissionError, EventType
from ..core.exceptions import ValidationError
from ..policy.model import Coordinate


@dataclass(frozen=True)
class NetworkInfo:
    ssid: Optional[str] = None
    bssid: Optional[str] = None


@dataclass(frozen=True)
class AdmissionRequest:
    """Yêu cầu chấm công đã được kiểm tra kiểu.

    `network` also arrives as `wifi_info` from older clients.
    """

    user_id: str
    event_type: EventType
    location: Optional[Coordinate] = None
    network: NetworkInfo = field(default_factory=NetworkInfo)
    face_embedding: Optional[Tuple[float, ...]] = None
    code: Optional[str] = None
    idempotency_key: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "AdmissionRequest":
        body = require_mapping(payload, "body")
        user_id = body.get("user_id")
        if isinstance(user_id, int) and not isinstance(user_id, bool):
            user_id = str(user_id)
        user_id = require_non_empty(user_id, "user_id")

        try:
            event_type = EventType(body.get("type"))
        except ValueError:
            raise ValidationError("type must be 'check_in' or 'check_out'") from None

        location = None
        if body.get("location") is not None:
            raw_location = require_mapping(body["location"], "location")
            location = Coordinate(
                lat=require_number(raw_location.get("lat"), "location.lat"),
                lng=require_number(raw_location.get("lng"), "location.lng"),
            )

        raw_network = body.get("network", body.get("wifi_info"))
        network = NetworkInfo()
        if raw_network is not None:
            raw_network = require_mapping(raw_network, "network")
            network = NetworkInfo(
                ssid=optional_string(raw_network.get("ssid"), "network.ssid"),
                bssid=optional_string(raw_network.get("bssid"), "network.bssid"),
            )

        embedding = body.get("face_embedding")
        code = body.get("code")
        if code is not None and not isinstance(code, str):
            code = str(code)

        key = body.get("idempotency_key")
        if key is not None:
            key = require_non_empty(key, "idempotency_key")
            if len(key) > 64:
                raise ValidationError("idempotency_key is too long")

        return cls(
            user_id=user_id,
            event_type=event_type,
            location=location,
            network=network,
            face_embedding=require_vector(embedding, "face_embedding") if embedding is not None else None,
            code=code or None,
            idempotency_key=key,
        )


@dataclass(frozen=True)
class AdmissionOutcome:
    status_code: int
    body: Dict[str, Any]

    @property
    def success(self) -> bool:
        return bool(self.body.get("success"))

    @property
    def error(self) -> Optional[AdmissionError]:
        tag = self.body.get("error")
        return AdmissionError(tag) if tag in AdmissionError._value2member_map_ else None

    @classmethod
    def accepted(cls, message: str, **extra: Any) -> "AdmissionOutcome":
        return cls(status_code=200, body={"success": True, "message": message, **extra})

    @classmethod
    def rejected(cls, error: AdmissionError, message: str) -> "AdmissionOutcome":
        return cls(status_code=error.http_status, body={"success": False, "error": error.value, "message": message})

    @classmethod
    def forbidden(cls, message: str = "Forbidden") -> "AdmissionOutcome":
        return cls(status_code=403, body={"success": False, "message": message})

    def to_response(self) -> Tuple[Dict[str, Any], int]:
        return self.body, self.status_code


@dataclass(frozen=True)
class AdmissionReceipt:
    """Kết quả đã lưu cho một idempotency key.

    A receipt without `status_code` is a reservation: the first request for
    the key is still being admitted.
    """

    idempotency_key: str
    user_id: str
    event_type: EventType
    status_code: Optional[int] = None
    body: Mapping[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    @property
    def completed(self) -> bool:
        return self.status_code is not None

    def to_outcome(self) -> AdmissionOutcome:
        return AdmissionOutcome(status_code=self.status_code, body=dict(self.body))
