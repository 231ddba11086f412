from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..core.enums import EventType
from ..policy.model import NotificationSettings
from .repository import NotificationRepository

logger = logging.getLogger(__name__)

_TITLES = {
    EventType.CHECK_IN: "Employee Check-in",
    EventType.CHECK_OUT: "Employee Check-out",
}


class AdminNotifier:
    """Ghi thông báo cho quản trị viên khi có sự kiện chấm công.

    Notification failures are logged and never block attendance.
    """

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def should_notify(self, event: EventType, settings: NotificationSettings) -> bool:
        if not settings.enabled:
            return False
        if event == EventType.CHECK_IN:
            return settings.notify_on_checkin
        return settings.notify_on_checkout

    def notify(
        self,
        event: EventType,
        *,
        user_id: str,
        settings: NotificationSettings,
        data: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        if not self.should_notify(event, settings):
            return False

        action = "checked in" if event == EventType.CHECK_IN else "checked out"
        try:
            self._notifications.create(
                type=event.value,
                title=_TITLES[event],
                message=f"User {user_id} {action}",
                data={"user_id": user_id, **dict(data or {})},
            )
        except Exception:
            logger.exception("Failed to write admin notification for user %s", user_id)
            return False
        return True
