from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Aviator Predictor API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:3020"]

    # Record store persistence
    storage_backend: str = "file"            # "file" | "memory"
    data_dir: str = "data/store"
    storage_quota_bytes: int | None = 5 * 1024 * 1024
    store_version: str = "1.0"
    log_capacity: int = 1000
    backup_retention: int = 5
    export_dir: str = "exports"

    # Maintenance timers (seconds)
    maintenance_enabled: bool = True
    autosave_interval_seconds: float = 30
    snapshot_interval_seconds: float = 60 * 60
    retention_interval_seconds: float = 24 * 60 * 60
    prediction_max_age_days: int = 30
    prediction_cycle_enabled: bool = True

    seed_sample_data: bool = True

    # Hardcoded admin credentials
    admin_username: str = "admin"
    admin_password: str = "admin123"

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_store: str = "INFO"            # RecordStore, backups, transfers
    log_level_storage: str = "WARNING"       # key-value storage adapters
    log_level_maintenance: str = "INFO"      # MaintenanceScheduler jobs
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_http: str = "WARNING"          # httpx / httpcore

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
