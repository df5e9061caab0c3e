"""Domain entity — one generated multiplier event."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from aviator.domain.timestamps import parse_timestamp, to_iso, utcnow


class PredictionStatus(str, Enum):
    """Lifecycle states of a prediction."""

    ACTIVE = "active"
    COMPLETED = "completed"


class PredictionResult(str, Enum):
    """Outcome recorded when a prediction completes."""

    SUCCESS = "success"
    FAILED = "failed"


PREDICTION_UPDATABLE_FIELDS = frozenset({"multiplier", "status", "result", "timestamp"})


def is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


@dataclass
class Prediction:
    """A predicted crash multiplier.

    ``result`` is set exactly when ``status`` is completed.
    """

    multiplier: float
    status: str = PredictionStatus.ACTIVE.value
    result: str | None = None
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=utcnow)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_completed(self) -> bool:
        return self.status == PredictionStatus.COMPLETED.value

    def invariant_error(self) -> str | None:
        """Describe why the status/result pair is inconsistent, or None when it is fine."""
        if self.status not in (PredictionStatus.ACTIVE.value, PredictionStatus.COMPLETED.value):
            return f"unknown status '{self.status}'"
        if self.is_completed:
            if self.result not in (PredictionResult.SUCCESS.value, PredictionResult.FAILED.value):
                return "completed predictions need a result of 'success' or 'failed'"
        elif self.result is not None:
            return "only completed predictions may carry a result"
        return None

    def update(self, fields: dict[str, Any]) -> None:
        for key, value in fields.items():
            if key == "timestamp":
                value = parse_timestamp(value) or self.timestamp
            setattr(self, key, value)
        self.updated_at = utcnow()

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "multiplier": self.multiplier,
            "status": self.status,
            "result": self.result,
            "timestamp": to_iso(self.timestamp),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        })
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Prediction":
        """Rebuild a prediction from its persisted form without validating it."""
        known = {"id", "multiplier", "status", "result", "timestamp", "createdAt", "updatedAt"}
        extra = {k: v for k, v in data.items() if k not in known}

        created_at = parse_timestamp(data.get("createdAt"))
        timestamp = parse_timestamp(data.get("timestamp")) or created_at or utcnow()
        created_at = created_at or timestamp
        updated_at = parse_timestamp(data.get("updatedAt")) or created_at

        kwargs: dict[str, Any] = {}
        if data.get("id") not in (None, ""):
            kwargs["id"] = str(data["id"])
        return cls(
            multiplier=data.get("multiplier", 0),
            status=data.get("status", PredictionStatus.ACTIVE.value),
            result=data.get("result"),
            timestamp=timestamp,
            created_at=created_at,
            updated_at=updated_at,
            extra=extra,
            **kwargs,
        )
