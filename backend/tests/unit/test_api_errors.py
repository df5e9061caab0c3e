"""Unit tests for the store-error → HTTP status mapping."""

import pytest

from aviator.domain.exceptions import (
    AccessDeniedError,
    DuplicateEntityError,
    EntityNotFoundError,
    EntityValidationError,
    PersistenceError,
    StoreError,
)
from aviator.presentation.api.errors import to_http_exception


@pytest.mark.filterwarnings("error")
@pytest.mark.parametrize(
    "error, expected",
    [
        (EntityValidationError("Client", "bad"), 422),
        (DuplicateEntityError("Client", "code", "X1"), 409),
        (EntityNotFoundError("Client", "c1"), 404),
        (AccessDeniedError("wrong code"), 401),
        (PersistenceError(["clients"]), 507),
        (StoreError("unexpected"), 500),
    ],
)
def test_to_http_exception_status(error, expected):
    exc = to_http_exception(error)
    assert exc.status_code == expected
    assert exc.detail == str(error)
