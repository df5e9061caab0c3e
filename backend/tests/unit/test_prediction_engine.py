"""Unit tests for the PredictionEngine formulas and cycle."""

import random
from datetime import datetime, timezone

import pytest

from aviator.application.services import PredictionEngine, RecordStore
from aviator.infrastructure.storage import InMemoryKeyValueStorage


class ScriptedRandom(random.Random):
    """Random whose ``random()`` returns a fixed script of values."""

    def __init__(self, values: list[float]):
        super().__init__(0)
        self._values = list(values)

    def random(self) -> float:
        return self._values.pop(0)


@pytest.fixture
def store() -> RecordStore:
    return RecordStore(InMemoryKeyValueStorage())


@pytest.mark.parametrize("algorithm", ["random", "pattern", "ai"])
def test_multipliers_stay_in_range(store: RecordStore, algorithm: str):
    engine = PredictionEngine(store, rng=random.Random(7))
    for _ in range(200):
        value = engine.generate_multiplier(algorithm)
        assert 0.75 <= value <= 5.0
        assert round(value, 2) == value


def test_random_multiplier_between_one_and_five(store: RecordStore):
    engine = PredictionEngine(store, rng=random.Random(1))
    values = [engine.generate_multiplier("random") for _ in range(200)]
    assert min(values) >= 1.0
    assert max(values) <= 5.0


def test_pattern_follows_recent_average(store: RecordStore):
    for _ in range(5):
        store.create_prediction({"multiplier": 2.0})
    engine = PredictionEngine(store, rng=random.Random(3))
    for _ in range(100):
        assert 1.0 <= engine.generate_multiplier("pattern") <= 3.0


def test_pattern_never_drops_below_one(store: RecordStore):
    store.create_prediction({"multiplier": 1.0})
    engine = PredictionEngine(store, rng=ScriptedRandom([0.0]))
    assert engine.generate_multiplier("pattern") == 1.0


def test_time_weighted_daytime_weekday(store: RecordStore):
    wednesday_noon = datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)
    engine = PredictionEngine(store, rng=ScriptedRandom([1.0]), clock=lambda: wednesday_noon)
    # base 1.5 * uniform(0.5, 2.5) at the top of the range
    assert engine.generate_multiplier("ai") == 3.75


def test_time_weighted_weekend_night_is_capped(store: RecordStore):
    saturday_night = datetime(2026, 10, 17, 22, 0, tzinfo=timezone.utc)
    engine = PredictionEngine(store, rng=ScriptedRandom([1.0]), clock=lambda: saturday_night)
    assert engine.generate_multiplier("ai") == 5.0


def test_generate_prediction_uses_configured_algorithm(store: RecordStore):
    store.update_settings({"algorithm": "random"})
    engine = PredictionEngine(store, rng=ScriptedRandom([0.5]))
    prediction = engine.generate_prediction()
    assert prediction.multiplier == 3.0
    assert prediction.status == "active"
    assert store.get_prediction(prediction.id) is not None


def test_resolve_active_predictions(store: RecordStore):
    first = store.create_prediction({"multiplier": 2.0})
    second = store.create_prediction({"multiplier": 3.0})
    third = store.create_prediction({"multiplier": 4.0})
    # first: completes as success; second: stays active; third: completes as failed
    engine = PredictionEngine(store, rng=ScriptedRandom([0.1, 0.5, 0.9, 0.2, 0.7]))

    completed = engine.resolve_active_predictions()

    assert [p.id for p in completed] == [first.id, third.id]
    assert store.get_prediction(first.id).result == "success"
    assert store.get_prediction(second.id).status == "active"
    assert store.get_prediction(third.id).result == "failed"


def test_run_cycle_generates_when_lucky(store: RecordStore):
    engine = PredictionEngine(store, rng=ScriptedRandom([0.1, 0.5]))
    prediction = engine.run_cycle()
    assert prediction is not None
    assert prediction.multiplier == 3.0


def test_run_cycle_skips_generation(store: RecordStore):
    engine = PredictionEngine(store, rng=ScriptedRandom([0.9]))
    assert engine.run_cycle() is None
    assert store.list_predictions() == []


@pytest.mark.parametrize("frequency, expected", [(5, 300.0), (2, 120.0), ("abc", 300.0), (0, 300.0)])
def test_cycle_interval_from_settings(store: RecordStore, frequency, expected):
    store.update_settings({"updateFrequency": frequency})
    engine = PredictionEngine(store)
    assert engine.cycle_interval_seconds() == expected
