from typing import Annotated

from fastapi import Depends

from budget_manager.budgets.dependencies import BudgetRepositoryDep
from budget_manager.clients.dependencies import ClientRepositoryDep
from budget_manager.dashboard.service import DashboardService


def get_dashboard_service(budget_repo: BudgetRepositoryDep, client_repo: ClientRepositoryDep) -> DashboardService:
    return DashboardService(budget_repo=budget_repo, client_repo=client_repo)

DashboardServiceDep = Annotated[DashboardService, Depends(get_dashboard_service)]
