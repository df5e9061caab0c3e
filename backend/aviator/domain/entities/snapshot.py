"""Domain entities describing whole-store state: metadata, snapshots and statistics."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from aviator.domain.timestamps import parse_timestamp, to_iso, utcnow


@dataclass
class StoreMetadata:
    """Derived description of the store, recomputed after every mutation."""

    version: str
    record_counts: dict[str, int] = field(default_factory=dict)
    last_updated: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastUpdated": to_iso(self.last_updated),
            "version": self.version,
            "recordCounts": dict(self.record_counts),
        }


@dataclass
class Snapshot:
    """A full, immutable copy of the store taken at ``timestamp``.

    ``data`` holds the serialized collections exactly as they are persisted.
    """

    timestamp: datetime
    version: str
    data: dict[str, Any]
    metadata: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": to_iso(self.timestamp),
            "version": self.version,
            "data": self.data,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "Snapshot | None":
        """Parse a persisted snapshot, returning None when it is not one."""
        if not isinstance(raw, dict) or not isinstance(raw.get("data"), dict):
            return None
        timestamp = parse_timestamp(raw.get("timestamp"))
        if timestamp is None:
            return None
        metadata = raw.get("metadata")
        return cls(
            timestamp=timestamp,
            version=str(raw.get("version", "")),
            data=raw["data"],
            metadata=metadata if isinstance(metadata, dict) else {},
        )


@dataclass
class SnapshotInfo:
    """Listing entry for a stored snapshot."""

    key: str
    timestamp: datetime
    version: str
    record_counts: dict[str, int] = field(default_factory=dict)


@dataclass
class StoreStatistics:
    """Read-only dashboard figures computed from the live collections."""

    total_clients: int
    active_clients: int
    inactive_clients: int
    total_predictions: int
    active_predictions: int
    completed_predictions: int
    connected_clients: int
    success_rate: int  # percent, 0 when nothing has completed
    database_size_kb: int
    last_backup: datetime | None = None
