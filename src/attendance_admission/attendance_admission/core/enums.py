from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    """Loại sự kiện chấm công gửi lên máy chủ."""

    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


class ProofMethod(str, Enum):
    """Cách người dùng chứng minh danh tính khi chấm công."""

    EMBEDDING = "embedding"
    CODE = "code"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    EARLY_OUT = "early_out"


class CheckFlag(str, Enum):
    """Soft flags recorded on check-out when a presence gate did not pass."""

    VALID = "valid"
    OUTSIDE_RADIUS = "outside_radius"
    UNAUTHORIZED = "unauthorized"


class AdmissionError(str, Enum):
    """Tagged rejection outcomes returned by the admission boundary."""

    LOCATION_INVALID = "LOCATION_INVALID"
    WIFI_INVALID = "WIFI_INVALID"
    FACE_MISMATCH = "FACE_MISMATCH"
    NO_FACE_PROFILE = "NO_FACE_PROFILE"
    EMBEDDING_MISMATCH = "EMBEDDING_MISMATCH"
    INVALID_CODE = "INVALID_CODE"
    NO_ACTIVE_SESSION = "NO_ACTIVE_SESSION"
    MISSING_PROOF = "MISSING_PROOF"
    CONFIG_ERROR = "CONFIG_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    STORAGE_ERROR = "STORAGE_ERROR"
    REQUEST_IN_PROGRESS = "REQUEST_IN_PROGRESS"

    @property
    def http_status(self) -> int:
        if self == AdmissionError.REQUEST_IN_PROGRESS:
            return 409
        if self in (AdmissionError.CONFIG_ERROR, AdmissionError.STORAGE_ERROR):
            return 500
        return 400


class QueueState(str, Enum):
    """Trạng thái bản ghi trong hàng đợi offline phía client."""

    PENDING = "pending"
    FAILED = "failed"


class Capability(str, Enum):
    CAMERA = "camera"
    LOCATION = "location"


class CapabilityStatus(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    PERMANENTLY_DENIED = "permanently_denied"
    RESTRICTED = "restricted"
    UNKNOWN = "unknown"

    @property
    def is_granted(self) -> bool:
        return self == CapabilityStatus.GRANTED
