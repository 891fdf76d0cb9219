import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from budget_manager.database import get_db_session
from budget_manager.clients.interfaces.repositories import AbstractClientRepository
from budget_manager.clients.repositories import SQLAlchemyClientRepository
from budget_manager.clients.service import ClientService

logger = logging.getLogger(__name__)


def get_client_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> AbstractClientRepository:
    """Fournit une instance du repository de clients (implémentation FastCRUD)."""
    return SQLAlchemyClientRepository(db_session=session)

ClientRepositoryDep = Annotated[AbstractClientRepository, Depends(get_client_repository)]


def get_client_service(client_repo: ClientRepositoryDep) -> ClientService:
    """Fournit une instance du service de gestion des clients."""
    logger.debug("Fourniture de ClientService avec repository")
    return ClientService(client_repo=client_repo)

ClientServiceDep = Annotated[ClientService, Depends(get_client_service)]
