"""Small formatting helpers for CLI output."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def relative_time(timestamp: str, now: Optional[datetime] = None) -> str:
    """Render an ISO-8601 timestamp as ``just now``, ``5m ago``, ``3h ago`` or ``2d ago``."""
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return "unknown"
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    minutes = int((now - moment).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def shorten(text: str, limit: int = 200) -> str:
    """Trim text to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[: max(limit - 3, 0)] + "..."
