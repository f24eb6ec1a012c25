"""Display helpers shared by the API responses."""
from __future__ import annotations

from datetime import datetime, timezone


def format_relative_time(value: datetime, now: datetime | None = None) -> str:
    """Return a coarse "time ago" label for ``value``.

    Naive datetimes are treated as UTC. Future timestamps read as "just now".
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = int((now - value).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60} minutes ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    return f"{seconds // 86400} days ago"


__all__ = ["format_relative_time"]
