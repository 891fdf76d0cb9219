import logging
from decimal import Decimal

from budget_manager.budgets.constants import BudgetStatus, RECENT_BUDGETS_LIMIT
from budget_manager.budgets.interfaces.repositories import AbstractBudgetRepository
from budget_manager.clients.interfaces.repositories import AbstractClientRepository
from budget_manager.dashboard.models import DashboardStats
from budget_manager.users.models import UserRead

logger = logging.getLogger(__name__)


class DashboardService:
    def __init__(self, budget_repo: AbstractBudgetRepository, client_repo: AbstractClientRepository):
        self.budget_repo = budget_repo
        self.client_repo = client_repo

    async def get_stats(self, current_user: UserRead) -> DashboardStats:
        """Totaux, répartition par statut et derniers budgets (périmètre complet pour un admin)."""
        user_filter = None if current_user.is_admin else current_user.id
        budgets = await self.budget_repo.list_all_for_user(user_id=user_filter)
        total_clients = await self.client_repo.count(user_id=user_filter)
        recent, _ = await self.budget_repo.list_budgets(user_id=user_filter, offset=0, limit=RECENT_BUDGETS_LIMIT)

        status_counts = {status.value: 0 for status in BudgetStatus}
        total_amount = Decimal(0)
        for budget in budgets:
            status_counts[BudgetStatus(budget.status).value] += 1
            total_amount += budget.total_amount or Decimal(0)

        logger.debug(f"[DashboardService] Stats user {current_user.id}: {len(budgets)} budgets, {total_clients} clients.")
        return DashboardStats(
            total_budgets=len(budgets),
            total_clients=total_clients,
            total_amount=total_amount,
            status_counts=status_counts,
            recent_budgets=recent,
        )
