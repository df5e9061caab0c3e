"""Access service — the hardcoded admin check and client code logins."""

import hmac
import logging

from aviator.application.services.record_store import RecordStore
from aviator.domain.entities import Client, Connection, LogLevel
from aviator.domain.exceptions import AccessDeniedError, EntityNotFoundError

logger = logging.getLogger(__name__)


class AccessService:
    """Role checks that sit in front of the store.

    Logging in or out only flips the client's connection flag; there are no
    sessions or tokens.
    """

    def __init__(self, store: RecordStore, admin_username: str, admin_password: str):
        self._store = store
        self._admin_username = admin_username
        self._admin_password = admin_password

    def admin_login(self, username: str, password: str) -> None:
        username_ok = hmac.compare_digest(username.encode(), self._admin_username.encode())
        password_ok = hmac.compare_digest(password.encode(), self._admin_password.encode())
        if not (username_ok and password_ok):
            self._deny("Invalid admin credentials")

    def client_login(self, code: str) -> Client:
        """Connect the client owning ``code``. It must be active and have paid."""
        client = self._store.get_client_by_code(code)
        if client is None or not client.is_active:
            self._deny("Invalid client code or inactive client")
        self._require_receipt(client)
        self._store.set_connection(client.id, connected=True)
        return client

    def client_logout(self, client_id: str) -> Connection:
        return self._store.set_connection(client_id, connected=False)

    def connect_client(self, client_id: str) -> Connection:
        """Admin override that marks a client connected."""
        client = self._store.get_client(client_id)
        if client is None:
            error = EntityNotFoundError("Client", client_id)
            self._store.log(f"Failed to connect client: {error}", LogLevel.ERROR)
            raise error
        self._require_receipt(client)
        connection = self._store.set_connection(client.id, connected=True)
        logger.info("Admin connected client %s (%s)", client.name, client.code)
        return connection

    def disconnect_client(self, client_id: str) -> Connection:
        connection = self._store.set_connection(client_id, connected=False)
        logger.info("Admin disconnected client %s", client_id)
        return connection

    def _require_receipt(self, client: Client) -> None:
        if not client.receipt_uploaded:
            self._deny(f"Cannot connect {client.name}: payment receipt not uploaded")

    def _deny(self, reason: str) -> None:
        self._store.log(f"Access denied: {reason}", LogLevel.ERROR)
        raise AccessDeniedError(reason)
