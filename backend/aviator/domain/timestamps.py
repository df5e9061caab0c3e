"""Timestamp helpers shared by the domain entities.

Entities keep timezone-aware UTC datetimes in memory and ISO-8601 strings on
disk. Older stores wrote epoch milliseconds, so parsing accepts both.
"""

from datetime import datetime, timezone
from typing import Any


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime | None) -> str | None:
    """Serialize a datetime to ISO-8601, passing None through."""
    if value is None:
        return None
    return value.isoformat()


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO string, epoch milliseconds or datetime into an aware datetime.

    Returns None for anything that cannot be interpreted as a point in time.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)
