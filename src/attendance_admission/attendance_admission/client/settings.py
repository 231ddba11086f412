from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ClientSettings:
    """Cấu hình phía thiết bị chấm công (đọc từ biến môi trường)."""

    api_url: str = "http://localhost:5000"
    queue_path: str = "attendance_queue.sqlite3"
    probe_timeout: float = 3.0
    submit_timeout: float = 10.0
    max_attempts: int = 10
    max_age_seconds: float = 7 * 24 * 3600
    backoff_base_seconds: float = 30.0
    backoff_cap_seconds: float = 3600.0
    sync_interval_seconds: float = 60.0
    permission_wait_seconds: float = 0.5

    @classmethod
    def from_env(cls) -> "ClientSettings":
        return cls(
            api_url=os.getenv("ATTENDANCE_API_URL", cls.api_url).rstrip("/"),
            queue_path=os.getenv("ATTENDANCE_QUEUE_PATH", cls.queue_path),
            probe_timeout=float(os.getenv("ATTENDANCE_PROBE_TIMEOUT", cls.probe_timeout)),
            submit_timeout=float(os.getenv("ATTENDANCE_SUBMIT_TIMEOUT", cls.submit_timeout)),
            max_attempts=int(os.getenv("ATTENDANCE_MAX_ATTEMPTS", cls.max_attempts)),
            max_age_seconds=float(os.getenv("ATTENDANCE_MAX_AGE_SECONDS", cls.max_age_seconds)),
            backoff_base_seconds=float(os.getenv("ATTENDANCE_BACKOFF_BASE", cls.backoff_base_seconds)),
            backoff_cap_seconds=float(os.getenv("ATTENDANCE_BACKOFF_CAP", cls.backoff_cap_seconds)),
            sync_interval_seconds=float(os.getenv("ATTENDANCE_SYNC_INTERVAL", cls.sync_interval_seconds)),
        )
