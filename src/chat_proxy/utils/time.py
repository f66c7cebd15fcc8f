"""Time utilities."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
