"""Domain entity — the mutable predictor configuration singleton."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from aviator.domain.timestamps import parse_timestamp, to_iso, utcnow


class PredictionAlgorithm(str, Enum):
    """Formulas the prediction engine can draw multipliers from."""

    RANDOM = "random"
    PATTERN = "pattern"
    AI = "ai"


_FIELD_MAP: dict[str, str] = {
    "algorithm": "algorithm",
    "updateFrequency": "update_frequency",
    "successThreshold": "success_threshold",
}


@dataclass
class PredictorSettings:
    """Predictor configuration. Updates replace values, no history is kept.

    Values are not range-checked; consumers fall back to defaults when a
    value is unusable.
    """

    algorithm: str = PredictionAlgorithm.RANDOM.value
    update_frequency: Any = 5  # minutes
    success_threshold: Any = 70  # percent
    updated_at: datetime | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def merge(self, fields: dict[str, Any]) -> None:
        for key, value in fields.items():
            if key in _FIELD_MAP:
                setattr(self, _FIELD_MAP[key], value)
            elif key != "updatedAt":
                self.extra[key] = value
        self.updated_at = utcnow()

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        for key, attr in _FIELD_MAP.items():
            data[key] = getattr(self, attr)
        if self.updated_at is not None:
            data["updatedAt"] = to_iso(self.updated_at)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PredictorSettings":
        settings = cls()
        for key, value in data.items():
            if key in _FIELD_MAP:
                setattr(settings, _FIELD_MAP[key], value)
            elif key != "updatedAt":
                settings.extra[key] = value
        settings.updated_at = parse_timestamp(data.get("updatedAt"))
        return settings
