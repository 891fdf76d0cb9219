from abc import ABC, abstractmethod
from typing import Optional, List, Tuple

from budget_manager.clients.models import ClientCreateInternal, ClientRead, ClientUpdate


class AbstractClientRepository(ABC):
    """Interface abstraite pour l'annuaire des clients."""

    @abstractmethod
    async def list_clients(self, *, user_id: Optional[int], offset: int = 0, limit: int = 100) -> Tuple[List[ClientRead], int]:
        """Liste les clients triés par nom (tous si user_id est None)."""
        pass

    @abstractmethod
    async def get(self, *, client_id: int) -> Optional[ClientRead]:
        pass

    @abstractmethod
    async def create(self, *, client_data: ClientCreateInternal) -> ClientRead:
        pass

    @abstractmethod
    async def update(self, *, client_id: int, client_data: ClientUpdate) -> Optional[ClientRead]:
        pass

    @abstractmethod
    async def delete(self, *, client_id: int) -> bool:
        pass

    @abstractmethod
    async def count(self, *, user_id: Optional[int]) -> int:
        """Nombre de clients (tous si user_id est None)."""
        pass

    @abstractmethod
    async def has_budgets(self, *, client_id: int) -> bool:
        """Indique si au moins un budget référence ce client."""
        pass
