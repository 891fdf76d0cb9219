import logging

from budget_manager.clients.models import ClientCreate, ClientCreateInternal, ClientRead, ClientUpdate, PaginatedClientRead
from budget_manager.clients.exceptions import ClientNotFoundException, ClientAccessForbiddenException, ClientInUseException
from budget_manager.clients.interfaces.repositories import AbstractClientRepository
from budget_manager.users.models import UserRead

logger = logging.getLogger(__name__)


class ClientService:
    """Service applicatif pour l'annuaire des clients."""

    def __init__(self, client_repo: AbstractClientRepository):
        self.client_repo = client_repo

    async def list_clients(self, current_user: UserRead, limit: int = 100, offset: int = 0) -> PaginatedClientRead:
        """Liste les clients de l'utilisateur (tous pour un admin), triés par nom."""
        logger.debug(f"[ClientService] Listage clients pour user {current_user.id}, limit={limit}, offset={offset}")
        user_filter = None if current_user.is_admin else current_user.id
        clients, total = await self.client_repo.list_clients(user_id=user_filter, offset=offset, limit=limit)
        return PaginatedClientRead(items=clients, total=total)

    async def get_client(self, client_id: int, current_user: UserRead) -> ClientRead:
        client = await self.client_repo.get(client_id=client_id)
        if client is None:
            raise ClientNotFoundException(client_id)
        if not current_user.is_admin and client.user_id != current_user.id:
            logger.warning(f"[ClientService] Accès refusé client {client_id} pour user {current_user.id}.")
            raise ClientAccessForbiddenException(client_id)
        return client

    async def create_client(self, client_data: ClientCreate, current_user: UserRead) -> ClientRead:
        logger.info(f"[ClientService] Création client '{client_data.name}' pour user {current_user.id}")
        internal = ClientCreateInternal(**client_data.model_dump(), user_id=current_user.id)
        return await self.client_repo.create(client_data=internal)

    async def update_client(self, client_id: int, client_data: ClientUpdate, current_user: UserRead) -> ClientRead:
        await self.get_client(client_id, current_user)
        updated = await self.client_repo.update(client_id=client_id, client_data=client_data)
        if updated is None:
            raise ClientNotFoundException(client_id)
        logger.info(f"[ClientService] Client ID {client_id} mis à jour.")
        return updated

    async def delete_client(self, client_id: int, current_user: UserRead) -> None:
        await self.get_client(client_id, current_user)
        if await self.client_repo.has_budgets(client_id=client_id):
            logger.warning(f"[ClientService] Suppression refusée: client {client_id} référencé par des budgets.")
            raise ClientInUseException(client_id)
        if not await self.client_repo.delete(client_id=client_id):
            raise ClientNotFoundException(client_id)
        logger.info(f"[ClientService] Client ID {client_id} supprimé.")
