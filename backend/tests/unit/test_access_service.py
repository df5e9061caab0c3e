"""Unit tests for the AccessService."""

import pytest

from aviator.application.services import AccessService, RecordStore
from aviator.domain.exceptions import AccessDeniedError, EntityNotFoundError
from aviator.infrastructure.storage import InMemoryKeyValueStorage


@pytest.fixture
def store() -> RecordStore:
    return RecordStore(InMemoryKeyValueStorage())


@pytest.fixture
def access(store: RecordStore) -> AccessService:
    return AccessService(store, admin_username="admin", admin_password="admin123")


def _client(store: RecordStore, code: str, **overrides):
    data = {"name": f"Client {code}", "code": code, "phone": "1", "country": "US", "receiptUploaded": True}
    data.update(overrides)
    return store.create_client(data)


def test_admin_login_accepts_configured_credentials(access: AccessService):
    access.admin_login("admin", "admin123")


@pytest.mark.parametrize("username, password", [("admin", "wrong"), ("root", "admin123"), ("", "")])
def test_admin_login_rejects_bad_credentials(access: AccessService, store: RecordStore, username, password):
    with pytest.raises(AccessDeniedError):
        access.admin_login(username, password)
    assert store.get_logs()[-1].level == "error"


def test_client_login_connects_active_paid_client(access: AccessService, store: RecordStore):
    client = _client(store, "PAID")
    logged_in = access.client_login("PAID")
    assert logged_in.id == client.id
    assert store.is_connected(client.id)


def test_client_login_rejects_unknown_code(access: AccessService):
    with pytest.raises(AccessDeniedError):
        access.client_login("NOPE")


def test_client_login_rejects_inactive_client(access: AccessService, store: RecordStore):
    client = _client(store, "OFF", status="inactive")
    with pytest.raises(AccessDeniedError):
        access.client_login("OFF")
    assert not store.is_connected(client.id)


def test_client_login_requires_receipt(access: AccessService, store: RecordStore):
    client = _client(store, "UNPAID", receiptUploaded=False)
    with pytest.raises(AccessDeniedError) as exc_info:
        access.client_login("UNPAID")
    assert "receipt" in exc_info.value.reason
    assert not store.is_connected(client.id)


def test_client_logout(access: AccessService, store: RecordStore):
    client = _client(store, "PAID")
    access.client_login("PAID")
    connection = access.client_logout(client.id)
    assert connection.connected is False
    assert not store.is_connected(client.id)


def test_admin_connect_and_disconnect(access: AccessService, store: RecordStore):
    client = _client(store, "PAID")
    assert access.connect_client(client.id).connected is True
    assert access.disconnect_client(client.id).connected is False


def test_admin_connect_unknown_client(access: AccessService, store: RecordStore):
    with pytest.raises(EntityNotFoundError):
        access.connect_client("ghost")
    assert store.get_logs()[-1].message.startswith("Failed to connect client")
