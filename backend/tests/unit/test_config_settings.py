"""Unit tests for application settings configuration."""

from pathlib import Path

import pytest

from aviator.config import Settings
from aviator.infrastructure.dependencies import build_container, build_storage
from aviator.infrastructure.storage import InMemoryKeyValueStorage, JsonFileKeyValueStorage


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("BACKUP_RETENTION", "3")
    monkeypatch.setenv("ADMIN_PASSWORD", "s3cret")

    settings = Settings(_env_file=None)

    assert settings.storage_backend == "memory"
    assert settings.backup_retention == 3
    assert settings.admin_password == "s3cret"
    assert settings.log_capacity == 1000


def test_build_storage_picks_backend(tmp_path: Path):
    memory = build_storage(Settings(_env_file=None, storage_backend="memory"))
    files = build_storage(Settings(_env_file=None, storage_backend="file", data_dir=str(tmp_path / "store")))

    assert isinstance(memory, InMemoryKeyValueStorage)
    assert isinstance(files, JsonFileKeyValueStorage)
    assert files.data_dir == tmp_path / "store"

    with pytest.raises(ValueError):
        build_storage(Settings(_env_file=None, storage_backend="redis"))


def test_build_container_shares_one_store():
    container = build_container(Settings(_env_file=None, backup_retention=2), storage=InMemoryKeyValueStorage())

    assert container.backups.retention == 2
    container.store.create_client({"name": "A", "code": "X1", "phone": "1", "country": "US", "receiptUploaded": True})
    assert container.access.client_login("X1").code == "X1"
    assert container.store.is_connected(container.store.get_client_by_code("X1").id)
