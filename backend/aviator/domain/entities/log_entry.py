"""Domain entity — append-only diagnostic record kept inside the store."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from aviator.domain.timestamps import parse_timestamp, to_iso, utcnow


class LogLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class LogEntry:
    message: str
    level: str = LogLevel.INFO.value
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": to_iso(self.timestamp),
            "level": self.level,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEntry":
        return cls(
            message=str(data.get("message", "")),
            level=data.get("level", LogLevel.INFO.value),
            timestamp=parse_timestamp(data.get("timestamp")) or utcnow(),
        )
