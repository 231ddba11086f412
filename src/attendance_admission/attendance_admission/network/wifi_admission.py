from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..policy.model import AdmissionPolicy


def normalize_ssid(ssid: Optional[str]) -> Optional[str]:
    """Android reports SSIDs wrapped in double quotes; strip them."""
    if ssid is None:
        return None
    value = ssid.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    return value or None


@dataclass(frozen=True)
class WifiCheck:
    passed: bool
    ssid: Optional[str]
    skipped: bool = False


class WifiAdmission:
    def check(self, ssid: Optional[str], policy: AdmissionPolicy) -> WifiCheck:
        normalized = normalize_ssid(ssid)
        if not policy.wifi_allowlist:
            return WifiCheck(passed=True, ssid=normalized, skipped=True)
        return WifiCheck(passed=normalized in policy.wifi_allowlist, ssid=normalized)
