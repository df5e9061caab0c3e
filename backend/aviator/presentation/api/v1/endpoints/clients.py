"""Client CRUD endpoints, plus the admin connect/disconnect overrides."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from aviator.application.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from aviator.application.schemas.store import ConnectionResponse
from aviator.application.services import AccessService, RecordStore
from aviator.domain.entities import Client
from aviator.domain.entities.client import generate_client_code
from aviator.domain.exceptions import EntityNotFoundError, StoreError
from aviator.infrastructure.dependencies import get_access_service, get_record_store
from aviator.presentation.api.errors import to_http_exception

router = APIRouter(prefix="/clients", tags=["Clients"])


def _to_response(client: Client, store: RecordStore) -> ClientResponse:
    response = ClientResponse.model_validate(client, from_attributes=True)
    response.connected = store.is_connected(client.id)
    return response


@router.get("", response_model=list[ClientResponse])
async def list_clients(
    status_filter: str | None = Query(None, alias="status", description="Filter by client status"),
    store: RecordStore = Depends(get_record_store),
) -> list[ClientResponse]:
    """Retrieve every client, optionally only those with the given status."""
    return [_to_response(c, store) for c in store.list_clients(status_filter)]


@router.get("/by-code/{code}", response_model=ClientResponse)
async def get_client_by_code(
    code: str,
    store: RecordStore = Depends(get_record_store),
) -> ClientResponse:
    client = store.get_client_by_code(code)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Client with code '{code}' not found",
        )
    return _to_response(client, store)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: str,
    store: RecordStore = Depends(get_record_store),
) -> ClientResponse:
    """Retrieve a single client by ID."""
    client = store.get_client(client_id)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(EntityNotFoundError("Client", client_id)),
        )
    return _to_response(client, store)


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    store: RecordStore = Depends(get_record_store),
) -> ClientResponse:
    """Register a new client. A login code is generated when none is given."""
    payload = data.model_dump(by_alias=True, exclude_none=True)
    if not payload.get("code"):
        payload["code"] = generate_client_code()
    try:
        client = store.create_client(payload)
    except StoreError as e:
        raise to_http_exception(e)
    return _to_response(client, store)


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: str,
    data: ClientUpdate,
    store: RecordStore = Depends(get_record_store),
) -> ClientResponse:
    """Merge the given fields into an existing client."""
    try:
        client = store.update_client(client_id, data.model_dump(by_alias=True, exclude_unset=True))
    except StoreError as e:
        raise to_http_exception(e)
    return _to_response(client, store)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: str,
    store: RecordStore = Depends(get_record_store),
) -> None:
    """Delete a client and its connection entry."""
    try:
        store.delete_client(client_id)
    except StoreError as e:
        raise to_http_exception(e)


@router.post("/{client_id}/connect", response_model=ConnectionResponse)
async def connect_client(
    client_id: str,
    access: AccessService = Depends(get_access_service),
) -> ConnectionResponse:
    """Admin override: mark a client connected. Requires an uploaded receipt."""
    try:
        connection = access.connect_client(client_id)
    except StoreError as e:
        raise to_http_exception(e)
    return ConnectionResponse(
        client_id=client_id,
        connected=connection.connected,
        timestamp=connection.timestamp,
        updated_at=connection.updated_at,
    )


@router.post("/{client_id}/disconnect", response_model=ConnectionResponse)
async def disconnect_client(
    client_id: str,
    access: AccessService = Depends(get_access_service),
) -> ConnectionResponse:
    try:
        connection = access.disconnect_client(client_id)
    except StoreError as e:
        raise to_http_exception(e)
    return ConnectionResponse(
        client_id=client_id,
        connected=connection.connected,
        timestamp=connection.timestamp,
        updated_at=connection.updated_at,
    )
