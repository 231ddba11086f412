from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..core.constants import DEFAULT_CODE_PERIOD_SECONDS, DEFAULT_RADIUS_METERS
from ..core.exceptions import ConfigurationError
from .model import AdmissionPolicy, Coordinate, NotificationSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

OFFICE_LOCATION = "office_location"
ALLOWED_RADIUS = "allowed_radius_meters"
WIFI_ALLOWLIST = "wifi_allowlist"
CODE_SECRET = "code_secret"
CODE_PERIOD = "code_period_seconds"
ADMIN_NOTIFICATIONS = "admin_notifications"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_office(value: Any) -> Optional[Coordinate]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{OFFICE_LOCATION} must be an object with lat/lng")
    lat, lng = value.get("lat"), value.get("lng")
    if not (_is_number(lat) and _is_number(lng)):
        raise ConfigurationError(f"{OFFICE_LOCATION} lat/lng must be numbers")
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise ConfigurationError(f"{OFFICE_LOCATION} is outside valid coordinate ranges")
    return Coordinate(lat=float(lat), lng=float(lng))


def _parse_radius(value: Any) -> float:
    if value is None:
        return DEFAULT_RADIUS_METERS
    # Older settings rows stored the radius as a JSON string
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            raise ConfigurationError(f"{ALLOWED_RADIUS} must be a number") from None
    if not _is_number(value) or value <= 0:
        raise ConfigurationError(f"{ALLOWED_RADIUS} must be a positive number")
    return float(value)


def _parse_allowlist(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if not isinstance(value, (list, tuple)) or not all(isinstance(s, str) for s in value):
        raise ConfigurationError(f"{WIFI_ALLOWLIST} must be a list of SSIDs")
    return frozenset(s.strip() for s in value if s.strip())


def _parse_secret(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{CODE_SECRET} must be a string")
    return value or None


def _parse_period(value: Any) -> int:
    if value is None:
        return DEFAULT_CODE_PERIOD_SECONDS
    if not _is_number(value) or int(value) <= 0:
        raise ConfigurationError(f"{CODE_PERIOD} must be a positive integer")
    return int(value)


def _parse_notifications(value: Any) -> NotificationSettings:
    if value is None:
        return NotificationSettings()
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{ADMIN_NOTIFICATIONS} must be an object")
    return NotificationSettings(
        enabled=bool(value.get("enabled", True)),
        notify_on_checkin=bool(value.get("notify_on_checkin", False)),
        notify_on_checkout=bool(value.get("notify_on_checkout", False)),
    )


def parse_policy(raw: Mapping[str, Any]) -> AdmissionPolicy:
    """Validate loosely-typed settings rows into an AdmissionPolicy."""

    return AdmissionPolicy(
        office=_parse_office(raw.get(OFFICE_LOCATION)),
        radius_meters=_parse_radius(raw.get(ALLOWED_RADIUS)),
        wifi_allowlist=_parse_allowlist(raw.get(WIFI_ALLOWLIST)),
        code_secret=_parse_secret(raw.get(CODE_SECRET)),
        code_period_seconds=_parse_period(raw.get(CODE_PERIOD)),
        notifications=_parse_notifications(raw.get(ADMIN_NOTIFICATIONS)),
    )


class PolicyService:
    """Use case: read the current admission policy.

    Settings are re-read on every call so operator changes apply to the next
    admission without a restart.
    """

    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def current(self) -> AdmissionPolicy:
        try:
            return parse_policy(self._settings.get_all())
        except ConfigurationError as e:
            logger.error("Admission settings are invalid: %s", e)
            raise
