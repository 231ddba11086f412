from __future__ import annotations

import math
from datetime import datetime, timezone


def now_utc() -> datetime:
    """Current UTC time (timezone-aware).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive values coming back from MySQL DATETIME columns."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db(value: datetime) -> datetime:
    """MySQL DATETIME has no zone: store naive UTC."""
    return as_utc(value).replace(tzinfo=None)


def parse_iso(value: str) -> datetime:
    return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def elapsed_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two instants, rounded half up, never negative."""
    seconds = (as_utc(end) - as_utc(start)).total_seconds()
    return max(0, int(math.floor(seconds / 60 + 0.5)))


def format_duration(minutes: int) -> str:
    hours, rest = divmod(max(0, int(minutes)), 60)
    if hours and rest:
        return f"{hours}h {rest}m"
    if hours:
        return f"{hours}h"
    return f"{rest}m"
