import logging
from typing import Optional, List, Tuple

from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession

from budget_manager.clients.models import Client, ClientCreateInternal, ClientRead, ClientUpdate
from budget_manager.clients.interfaces.repositories import AbstractClientRepository
from budget_manager.budgets.models import Budget

logger = logging.getLogger(__name__)


class SQLAlchemyClientRepository(AbstractClientRepository):
    """Implémentation FastCRUD/SQLAlchemy de l'annuaire des clients."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud = FastCRUD(Client)
        self.budget_crud = FastCRUD(Budget)

    async def list_clients(self, *, user_id: Optional[int], offset: int = 0, limit: int = 100) -> Tuple[List[ClientRead], int]:
        filters = {} if user_id is None else {"user_id": user_id}
        result = await self.crud.get_multi(
            self.db,
            offset=offset,
            limit=limit,
            schema_to_select=ClientRead,
            return_as_model=True,
            sort_columns="name",
            sort_orders="asc",
            **filters,
        )
        return result["data"], result["total_count"]

    async def get(self, *, client_id: int) -> Optional[ClientRead]:
        return await self.crud.get(self.db, schema_to_select=ClientRead, return_as_model=True, id=client_id)

    async def create(self, *, client_data: ClientCreateInternal) -> ClientRead:
        client = await self.crud.create(self.db, client_data, schema_to_select=ClientRead, return_as_model=True)
        logger.info(f"[Repo] Client ID {client.id} créé pour user {client.user_id}.")
        return client

    async def update(self, *, client_id: int, client_data: ClientUpdate) -> Optional[ClientRead]:
        if not await self.crud.exists(self.db, id=client_id):
            return None
        await self.crud.update(self.db, client_data.model_dump(exclude_unset=True), id=client_id)
        return await self.get(client_id=client_id)

    async def delete(self, *, client_id: int) -> bool:
        if not await self.crud.exists(self.db, id=client_id):
            return False
        await self.crud.delete(self.db, id=client_id)
        return True

    async def count(self, *, user_id: Optional[int]) -> int:
        filters = {} if user_id is None else {"user_id": user_id}
        return await self.crud.count(self.db, **filters)

    async def has_budgets(self, *, client_id: int) -> bool:
        return await self.budget_crud.exists(self.db, client_id=client_id)
