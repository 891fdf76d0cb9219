from abc import ABC, abstractmethod
from typing import Optional, List, Tuple, Collection

from budget_manager.budgets.models import Budget, BudgetItem, BudgetSummary


class AbstractBudgetRepository(ABC):
    """
    Interface abstraite du stockage des budgets et de leurs lignes.

    Les écritures ne sont rendues définitives que par commit() ; le service
    appelle commit() une seule fois par opération et rollback() en cas d'échec.
    """

    @abstractmethod
    async def get_budget(self, *, budget_id: int) -> Optional[Budget]:
        pass

    @abstractmethod
    async def list_budget_items(self, *, budget_id: int) -> List[BudgetItem]:
        """Lignes du budget (matières et extras), dans l'ordre d'insertion."""
        pass

    @abstractmethod
    async def upsert_budget(self, *, budget: Budget) -> int:
        """Insère le budget (id absent) ou met à jour l'existant ; retourne son id."""
        pass

    @abstractmethod
    async def upsert_line_item(self, *, item: BudgetItem) -> int:
        """Insère la ligne (id absent ou inconnu pour ce budget) ou la met à jour ; retourne son id."""
        pass

    @abstractmethod
    async def delete_line_items(self, *, budget_id: int, keep_ids: Optional[Collection[int]] = None) -> int:
        """Supprime les lignes du budget dont l'id n'est pas dans keep_ids ; retourne le nombre supprimé."""
        pass

    @abstractmethod
    async def list_budgets(self, *, user_id: Optional[int], offset: int = 0, limit: int = 100) -> Tuple[List[BudgetSummary], int]:
        """Liste paginée, du plus récent au plus ancien, avec nom et marque du client (tous si user_id est None)."""
        pass

    @abstractmethod
    async def list_all_for_user(self, *, user_id: Optional[int]) -> List[Budget]:
        pass

    @abstractmethod
    async def delete_budget(self, *, budget_id: int) -> bool:
        """Supprime les lignes puis le budget."""
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass
