"""Login endpoints. A successful login only flips the client's connection flag."""

from fastapi import APIRouter, Depends, status

from aviator.application.schemas.client import ClientResponse
from aviator.application.schemas.store import AdminLoginRequest, ClientLoginRequest
from aviator.application.services import AccessService
from aviator.domain.exceptions import StoreError
from aviator.infrastructure.dependencies import get_access_service
from aviator.presentation.api.errors import to_http_exception

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/admin/login", status_code=status.HTTP_204_NO_CONTENT)
async def admin_login(
    body: AdminLoginRequest,
    access: AccessService = Depends(get_access_service),
) -> None:
    try:
        access.admin_login(body.username, body.password)
    except StoreError as e:
        raise to_http_exception(e)


@router.post("/client/login", response_model=ClientResponse)
async def client_login(
    body: ClientLoginRequest,
    access: AccessService = Depends(get_access_service),
) -> ClientResponse:
    """Log a client in by code. The client must be active with a receipt on file."""
    try:
        client = access.client_login(body.code)
    except StoreError as e:
        raise to_http_exception(e)
    response = ClientResponse.model_validate(client, from_attributes=True)
    response.connected = True
    return response


@router.post("/client/{client_id}/logout", status_code=status.HTTP_204_NO_CONTENT)
async def client_logout(
    client_id: str,
    access: AccessService = Depends(get_access_service),
) -> None:
    try:
        access.client_logout(client_id)
    except StoreError as e:
        raise to_http_exception(e)
