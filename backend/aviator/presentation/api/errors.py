"""Translate store failures into HTTP errors for the controllers."""

from fastapi import HTTPException, status

from aviator.domain.exceptions import (
    AccessDeniedError,
    DuplicateEntityError,
    EntityNotFoundError,
    EntityValidationError,
    PersistenceError,
    StoreError,
)

_STATUS_BY_ERROR: list[tuple[type[StoreError], int]] = [
    (EntityValidationError, 422),
    (DuplicateEntityError, status.HTTP_409_CONFLICT),
    (EntityNotFoundError, status.HTTP_404_NOT_FOUND),
    (AccessDeniedError, status.HTTP_401_UNAUTHORIZED),
    (PersistenceError, status.HTTP_507_INSUFFICIENT_STORAGE),
]


def to_http_exception(error: StoreError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
