"""Demo records seeded into an empty store on first start."""

import logging
from datetime import timedelta

from aviator.application.services.record_store import RecordStore
from aviator.domain.exceptions import StoreError
from aviator.domain.timestamps import utcnow

logger = logging.getLogger(__name__)

SAMPLE_CLIENTS = [
    {
        "name": "John Doe", "phone": "+1234567890", "country": "United States",
        "subscription": "3 Months", "code": "CLIENT001", "status": "active",
        "receiptUploaded": True, "receiptName": "receipt_001.pdf",
    },
    {
        "name": "Jane Smith", "phone": "+1987654321", "country": "Canada",
        "subscription": "3 Months", "code": "CLIENT002", "status": "active",
        "receiptUploaded": True, "receiptName": "receipt_002.pdf",
    },
    {
        "name": "Mike Johnson", "phone": "+1122334455", "country": "United Kingdom",
        "subscription": "3 Months", "code": "CLIENT003", "status": "inactive",
        "receiptUploaded": False, "receiptName": None,
    },
]


def _sample_predictions() -> list[dict]:
    now = utcnow()
    return [
        {"multiplier": 2.5, "status": "completed", "result": "success", "timestamp": now - timedelta(hours=1)},
        {"multiplier": 1.8, "status": "completed", "result": "failed", "timestamp": now - timedelta(minutes=30)},
        {"multiplier": 3.2, "status": "active", "result": None, "timestamp": now},
    ]


def seed_sample_data(store: RecordStore) -> tuple[int, int]:
    """Fill empty client/prediction collections with demo records.

    Returns how many clients and predictions were created.
    """
    clients = predictions = 0

    if not store.list_clients():
        for data in SAMPLE_CLIENTS:
            try:
                store.create_client(dict(data))
                clients += 1
            except StoreError as exc:
                logger.warning("Could not seed sample client %s: %s", data["code"], exc)

    if not store.list_predictions():
        for data in _sample_predictions():
            try:
                store.create_prediction(data)
                predictions += 1
            except StoreError as exc:
                logger.warning("Could not seed sample prediction: %s", exc)

    if clients or predictions:
        logger.info("Seeded %d sample clients and %d sample predictions", clients, predictions)
    return clients, predictions
