"""Clock abstraction and the time arithmetic shared by reports and cycles."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol

DEFAULT_VALIDITY_WINDOW = timedelta(hours=24)


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError("Timestamps must include timezone information")
    return value.astimezone(UTC)


def age_in_hours(since: datetime, now: datetime) -> float:
    return (now - since) / timedelta(hours=1)


def recency_factor(
    reported_at: datetime,
    now: datetime,
    *,
    window: timedelta = DEFAULT_VALIDITY_WINDOW,
) -> float:
    """Linear decay from 1 at submission to 0 at the end of the validity window."""

    window_hours = window / timedelta(hours=1)
    if window_hours <= 0:
        return 0.0
    factor = 1.0 - age_in_hours(reported_at, now) / window_hours
    return max(0.0, min(1.0, factor))


def recency_label(since: datetime, now: datetime) -> str:
    """Render ``since`` relative to ``now`` as e.g. ``"5 minutes ago"``."""

    elapsed = max(now - since, timedelta(0))
    minutes = int(elapsed / timedelta(minutes=1))
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    return _plural(hours // 24, "day")


def _plural(count: int, unit: str) -> str:
    suffix = "" if count == 1 else "s"
    return f"{count} {unit}{suffix} ago"


__all__ = [
    "DEFAULT_VALIDITY_WINDOW",
    "Clock",
    "age_in_hours",
    "ensure_aware",
    "recency_factor",
    "recency_label",
    "utcnow",
]
