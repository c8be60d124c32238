from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Return current time as tz-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_rfc3339(dt: datetime) -> str:
    """Format an entity timestamp for snapshots, e.g. 2025-01-01T00:00:00.000000Z."""
    utc = normalize_dt(dt).astimezone(timezone.utc)
    return utc.isoformat(timespec="microseconds").replace("+00:00", "Z")


def parse_rfc3339(value: str) -> datetime:
    """
    Parse a snapshot timestamp back into a tz-aware UTC datetime.

    Both the 'Z' suffix written by `to_rfc3339` and explicit offsets are
    accepted; naive timestamps are rejected.
    """
    if not isinstance(value, str) or not value:
        raise ValueError("RFC3339 value must be a non-empty string")

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    return normalize_dt(datetime.fromisoformat(text)).astimezone(timezone.utc)


def normalize_dt(dt: datetime) -> datetime:
    """Ensure datetime is tz-aware. Raises if naive."""
    if not isinstance(dt, datetime):
        raise TypeError("dt must be a datetime")
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    return dt
