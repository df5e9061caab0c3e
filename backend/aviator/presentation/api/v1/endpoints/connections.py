"""Client connection flag endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from aviator.application.schemas.store import ConnectionResponse, ConnectionUpdate
from aviator.application.services import RecordStore
from aviator.domain.entities import Connection
from aviator.domain.exceptions import StoreError
from aviator.infrastructure.dependencies import get_record_store
from aviator.presentation.api.errors import to_http_exception

router = APIRouter(prefix="/connections", tags=["Connections"])


def _to_response(client_id: str, connection: Connection) -> ConnectionResponse:
    return ConnectionResponse(
        client_id=client_id,
        connected=connection.connected,
        timestamp=connection.timestamp,
        updated_at=connection.updated_at,
    )


@router.get("", response_model=list[ConnectionResponse])
async def list_connections(
    store: RecordStore = Depends(get_record_store),
) -> list[ConnectionResponse]:
    return [_to_response(cid, conn) for cid, conn in store.get_all_connections().items()]


@router.get("/{client_id}", response_model=ConnectionResponse)
async def get_connection(
    client_id: str,
    store: RecordStore = Depends(get_record_store),
) -> ConnectionResponse:
    connection = store.get_connection(client_id)
    if connection is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No connection recorded for client '{client_id}'",
        )
    return _to_response(client_id, connection)


@router.put("/{client_id}", response_model=ConnectionResponse)
async def set_connection(
    client_id: str,
    body: ConnectionUpdate,
    store: RecordStore = Depends(get_record_store),
) -> ConnectionResponse:
    """Set the connection flag of an existing client."""
    try:
        connection = store.set_connection(client_id, body.connected)
    except StoreError as e:
        raise to_http_exception(e)
    return _to_response(client_id, connection)
