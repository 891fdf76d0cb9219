import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from budget_manager.database import get_db_session
from budget_manager.budgets.interfaces.repositories import AbstractBudgetRepository
from budget_manager.budgets.repositories import SQLAlchemyBudgetRepository
from budget_manager.budgets.service import BudgetService
from budget_manager.clients.dependencies import ClientRepositoryDep
from budget_manager.storage.dependencies import ObjectStoreDep

logger = logging.getLogger(__name__)


def get_budget_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> AbstractBudgetRepository:
    """Fournit une instance du repository des budgets (implémentation SQLAlchemy)."""
    return SQLAlchemyBudgetRepository(db_session=session)

BudgetRepositoryDep = Annotated[AbstractBudgetRepository, Depends(get_budget_repository)]


def get_budget_service(
    budget_repo: BudgetRepositoryDep,
    client_repo: ClientRepositoryDep,
    object_store: ObjectStoreDep,
) -> BudgetService:
    """Fournit une instance du service des budgets avec ses collaborateurs."""
    logger.debug("Fourniture de BudgetService avec repositories et stockage")
    return BudgetService(budget_repo=budget_repo, client_repo=client_repo, object_store=object_store)

BudgetServiceDep = Annotated[BudgetService, Depends(get_budget_service)]
