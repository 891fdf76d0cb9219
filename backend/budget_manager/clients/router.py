import logging
from typing import List

from fastapi import APIRouter, HTTPException, status, Path, Body, Response

from budget_manager.config import settings
from budget_manager.auth.dependencies import CurrentUserDep
from budget_manager.core.pagination import PaginationParams, set_content_range
from budget_manager.clients.dependencies import ClientServiceDep
from budget_manager.clients.models import ClientRead, ClientCreate, ClientUpdate
from budget_manager.clients.exceptions import (
    ClientNotFoundException, ClientAccessForbiddenException, ClientInUseException
)

logger = logging.getLogger(__name__)

client_router = APIRouter(
    prefix="/clients",
    tags=["Clients"]
)


def handle_client_service_errors(e: Exception):
    if isinstance(e, ClientNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ClientAccessForbiddenException):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if isinstance(e, ClientInUseException):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    logger.error(f"[Client API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=settings.CLIENT_ERROR_MSG)


@client_router.get("", response_model=List[ClientRead], summary="Lister les clients (triés par nom)")
async def list_clients(
    service: ClientServiceDep,
    current_user: CurrentUserDep,
    response: Response,
    pagination: PaginationParams,
):
    limit, offset = pagination
    logger.info(f"API list_clients pour user {current_user.id}: limit={limit}, offset={offset}")
    try:
        result = await service.list_clients(current_user, limit=limit, offset=offset)
    except Exception as e:
        handle_client_service_errors(e)
    set_content_range(response, "clients", offset, len(result.items), result.total)
    return result.items


@client_router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED, summary="Créer un client")
async def create_client(
    service: ClientServiceDep,
    current_user: CurrentUserDep,
    client_in: ClientCreate,
):
    logger.info(f"API create_client par user {current_user.id}: name={client_in.name}")
    try:
        return await service.create_client(client_in, current_user)
    except Exception as e:
        handle_client_service_errors(e)


@client_router.get("/{client_id}", response_model=ClientRead, summary="Récupérer un client par ID")
async def get_client(
    service: ClientServiceDep,
    current_user: CurrentUserDep,
    client_id: int = Path(..., ge=1),
):
    try:
        return await service.get_client(client_id, current_user)
    except Exception as e:
        handle_client_service_errors(e)


@client_router.put("/{client_id}", response_model=ClientRead, summary="Mettre à jour un client")
async def update_client(
    service: ClientServiceDep,
    current_user: CurrentUserDep,
    client_id: int = Path(..., ge=1),
    client_in: ClientUpdate = Body(...),
):
    logger.info(f"API update_client par user {current_user.id}: ID={client_id}")
    try:
        return await service.update_client(client_id, client_in, current_user)
    except Exception as e:
        handle_client_service_errors(e)


@client_router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Supprimer un client")
async def delete_client(
    service: ClientServiceDep,
    current_user: CurrentUserDep,
    client_id: int = Path(..., ge=1),
):
    logger.info(f"API delete_client par user {current_user.id}: ID={client_id}")
    try:
        await service.delete_client(client_id, current_user)
    except Exception as e:
        handle_client_service_errors(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
