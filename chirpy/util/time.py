from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utcnow_iso() -> str:
    """Current UTC time as ISO-8601 string with Z."""
    return utcnow().isoformat().replace("+00:00", "Z")
