"""Centralized logging configuration.

Applies per-category log levels from Settings so that chatty loggers
(e.g. the storage adapters, uvicorn access lines) can be tuned without
affecting the rest of the application.

Usage:
    from aviator.infrastructure.logging.log_config import setup_logging
    setup_logging()   # Call once at startup (in the FastAPI lifespan)
"""

import logging
import sys

from aviator.config import get_settings


# ── Logger-name → Settings-field mapping ────────────────────────────

_CATEGORY_MAP: dict[str, list[str]] = {
    "log_level_store": [
        "aviator.application.services.record_store",
        "aviator.application.services.backup_service",
        "aviator.application.services.transfer_service",
        "aviator.application.services.access_service",
        "aviator.application.services.prediction_engine",
    ],
    "log_level_storage": [
        "aviator.infrastructure.storage",
    ],
    "log_level_maintenance": [
        "MaintenanceScheduler",
        "aviator.application.services.maintenance_scheduler",
    ],
    "log_level_uvicorn": [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
    ],
    "log_level_http": [
        "httpx",
        "httpcore",
    ],
}


def setup_logging() -> None:
    """Configure Python logging levels from application settings."""
    settings = get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))

    # uvicorn usually installs a handler; tests and scripts may not
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)s — %(message)s",
            )
        )
        root.addHandler(handler)

    for settings_field, logger_names in _CATEGORY_MAP.items():
        level = _parse_level(getattr(settings, settings_field, "INFO"))
        for name in logger_names:
            logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging configured — root=%s, store=%s, storage=%s, maintenance=%s",
        settings.log_level,
        settings.log_level_store,
        settings.log_level_storage,
        settings.log_level_maintenance,
    )


def _parse_level(raw: str) -> int:
    """Convert a level name string to a logging constant, defaulting to INFO."""
    numeric = getattr(logging, raw.upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO
