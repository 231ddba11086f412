from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import EventType
from .model import AdmissionReceipt


class ReceiptRepository(Protocol):
    def get(self, idempotency_key: str) -> Optional[AdmissionReceipt]:
        raise NotImplementedError

    def reserve(self, *, idempotency_key: str, user_id: str, event_type: EventType) -> Optional[AdmissionReceipt]:
        """Claim a key atomically.

        Returns None when this call created the reservation, otherwise the
        receipt already stored under the key (possibly still pending).
        """
        raise NotImplementedError

    def complete(self, receipt: AdmissionReceipt) -> None:
        raise NotImplementedError

    def release(self, idempotency_key: str) -> None:
        """Drop a pending reservation so the key can be admitted again."""
        raise NotImplementedError
