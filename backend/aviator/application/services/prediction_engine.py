"""Prediction engine — draws multipliers from the configured formula and settles active predictions.

None of the formulas learn anything; they exist to feed the store.
"""

import logging
import random
from collections.abc import Callable
from datetime import datetime

from aviator.application.services.record_store import RecordStore
from aviator.domain.entities import (
    Prediction,
    PredictionAlgorithm,
    PredictionResult,
    PredictionStatus,
)
from aviator.domain.timestamps import utcnow

logger = logging.getLogger(__name__)

MIN_MULTIPLIER = 1.0
MAX_MULTIPLIER = 5.0
PATTERN_WINDOW = 5

COMPLETION_CHANCE = 0.3
SUCCESS_CHANCE = 0.6
GENERATION_CHANCE = 0.2


class PredictionEngine:
    """Generates predictions into the store and completes them at random.

    ``rng`` and ``clock`` are injectable so the formulas can be tested
    deterministically.
    """

    def __init__(
        self,
        store: RecordStore,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._store = store
        self._rng = rng or random.Random()
        self._clock = clock or (lambda: datetime.now().astimezone())

    def generate_multiplier(self, algorithm: str | None = None) -> float:
        algorithm = algorithm or self._store.get_settings().algorithm
        if algorithm == PredictionAlgorithm.PATTERN.value:
            value = self._pattern_multiplier()
        elif algorithm == PredictionAlgorithm.AI.value:
            value = self._time_weighted_multiplier()
        else:
            value = self._random_multiplier()
        return round(value, 2)

    def generate_prediction(self) -> Prediction:
        multiplier = self.generate_multiplier()
        return self._store.create_prediction({
            "multiplier": multiplier,
            "status": PredictionStatus.ACTIVE.value,
            "result": None,
            "timestamp": utcnow(),
        })

    def resolve_active_predictions(self) -> list[Prediction]:
        """Complete each active prediction with COMPLETION_CHANCE probability."""
        completed: list[Prediction] = []
        for prediction in self._store.list_active_predictions():
            if self._rng.random() >= COMPLETION_CHANCE:
                continue
            result = (
                PredictionResult.SUCCESS.value
                if self._rng.random() < SUCCESS_CHANCE
                else PredictionResult.FAILED.value
            )
            completed.append(self._store.complete_prediction(prediction.id, result))
        if completed:
            logger.info("Completed %d active predictions", len(completed))
        return completed

    def run_cycle(self) -> Prediction | None:
        """One tick of the prediction timer: settle, then maybe draw a new prediction."""
        self.resolve_active_predictions()
        if self._rng.random() < GENERATION_CHANCE:
            return self.generate_prediction()
        return None

    def cycle_interval_seconds(self, fallback_minutes: float = 5) -> float:
        """Seconds between cycles, from the ``updateFrequency`` setting (minutes)."""
        frequency = self._store.get_settings().update_frequency
        if isinstance(frequency, bool) or not isinstance(frequency, (int, float)) or frequency <= 0:
            frequency = fallback_minutes
        return float(frequency) * 60

    # ── Formulas ────────────────────────────────────────────────────

    def _random_multiplier(self) -> float:
        return self._rng.uniform(MIN_MULTIPLIER, MAX_MULTIPLIER)

    def _pattern_multiplier(self) -> float:
        recent = [
            p.multiplier
            for p in self._store.recent_predictions(PATTERN_WINDOW)
            if isinstance(p.multiplier, (int, float))
        ]
        if not recent:
            return self._random_multiplier()
        average = sum(recent) / len(recent)
        return max(MIN_MULTIPLIER, average + self._rng.uniform(-1, 1))

    def _time_weighted_multiplier(self) -> float:
        now = self._clock()
        base = 2.5 if now.hour >= 18 or now.hour <= 6 else 1.5
        if now.weekday() >= 5:
            base *= 1.2
        return min(MAX_MULTIPLIER, base * self._rng.uniform(0.5, 2.5))
