from abc import ABC, abstractmethod
from typing import Optional

from budget_manager.users.models import UserRead


class AbstractUserRepository(ABC):
    """Interface abstraite pour le repository des utilisateurs."""

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[UserRead]:
        """Récupère un utilisateur par son ID."""
        pass
