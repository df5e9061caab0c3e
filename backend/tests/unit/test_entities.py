"""Unit tests for domain entities and timestamp parsing."""

import re
from datetime import datetime, timezone

from aviator.domain.entities import Client, Prediction, PredictorSettings
from aviator.domain.entities.client import generate_client_code
from aviator.domain.timestamps import parse_timestamp


def test_parse_timestamp_accepts_iso_and_epoch_millis():
    expected = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert parse_timestamp("2024-01-01T00:00:00Z") == expected
    assert parse_timestamp("2024-01-01T00:00:00.000+00:00") == expected
    assert parse_timestamp(1704067200000) == expected
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp(True) is None


def test_generated_client_code_format():
    assert re.fullmatch(r"CLIENT\d{6}[A-Z0-9]{3}", generate_client_code())


def test_client_from_dict_keeps_unknown_fields():
    client = Client.from_dict({
        "id": 42,
        "name": "A",
        "code": "X1",
        "phone": "1",
        "country": "US",
        "receiptUploaded": True,
        "notes": "vip",
        "createdAt": 1704067200000,
    })
    assert client.id == "42"
    assert client.receipt_uploaded is True
    assert client.extra == {"notes": "vip"}
    data = client.to_dict()
    assert data["notes"] == "vip"
    assert data["createdAt"] == "2024-01-01T00:00:00+00:00"


def test_prediction_invariant():
    assert Prediction(multiplier=2.0).invariant_error() is None
    assert Prediction(multiplier=2.0, status="completed").invariant_error()
    assert Prediction(multiplier=2.0, status="completed", result="failed").invariant_error() is None
    assert Prediction(multiplier=2.0, result="success").invariant_error()
    assert Prediction(multiplier=2.0, status="paused").invariant_error()


def test_settings_merge_keeps_unknown_keys():
    settings = PredictorSettings()
    settings.merge({"successThreshold": 80, "theme": "dark"})
    data = settings.to_dict()
    assert data["successThreshold"] == 80
    assert data["theme"] == "dark"
    assert data["algorithm"] == "random"
    assert "updatedAt" in data
