"""Domain entity — the latest known connectivity flag of a client."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from aviator.domain.timestamps import parse_timestamp, to_iso, utcnow


@dataclass
class Connection:
    """Whether a client is currently connected to the predictor, and since when.

    This is a flag, not a network session.
    """

    connected: bool
    timestamp: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "connected": self.connected,
            "timestamp": to_iso(self.timestamp),
            "updatedAt": to_iso(self.updated_at),
        })
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Connection":
        extra = {k: v for k, v in data.items() if k not in ("connected", "timestamp", "updatedAt")}
        timestamp = parse_timestamp(data.get("timestamp")) or utcnow()
        return cls(
            connected=bool(data.get("connected", False)),
            timestamp=timestamp,
            updated_at=parse_timestamp(data.get("updatedAt")) or timestamp,
            extra=extra,
        )
