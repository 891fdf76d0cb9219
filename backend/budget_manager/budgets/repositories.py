import logging
from datetime import datetime, timezone
from typing import Optional, List, Tuple, Collection

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from budget_manager.budgets.interfaces.repositories import AbstractBudgetRepository
from budget_manager.budgets.models import Budget, BudgetItem, BudgetSummary, LineItem
from budget_manager.clients.models import Client

logger = logging.getLogger(__name__)

_LINE_FIELDS = tuple(name for name in LineItem.model_fields if name != "id")


class SQLAlchemyBudgetRepository(AbstractBudgetRepository):
    """Implémentation SQLAlchemy du stockage des budgets."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_budget(self, *, budget_id: int) -> Optional[Budget]:
        return await self.db.get(Budget, budget_id)

    async def list_budget_items(self, *, budget_id: int) -> List[BudgetItem]:
        statement = (
            select(BudgetItem)
            .where(BudgetItem.budget_id == budget_id)
            .order_by(BudgetItem.id)
        )
        result = await self.db.execute(statement)
        return list(result.scalars().all())

    async def upsert_budget(self, *, budget: Budget) -> int:
        if budget.id is None:
            self.db.add(budget)
            await self.db.flush()
            logger.info(f"[Repo] Budget ID {budget.id} inséré (user {budget.user_id}).")
            return budget.id

        budget.updated_at = datetime.now(timezone.utc)
        merged = await self.db.merge(budget)
        await self.db.flush()
        logger.debug(f"[Repo] Budget ID {merged.id} mis à jour.")
        return merged.id

    async def upsert_line_item(self, *, item: BudgetItem) -> int:
        existing = await self.db.get(BudgetItem, item.id) if item.id is not None else None
        if existing is None or existing.budget_id != item.budget_id:
            new_item = BudgetItem(budget_id=item.budget_id, **{name: getattr(item, name) for name in _LINE_FIELDS})
            self.db.add(new_item)
            await self.db.flush()
            return new_item.id

        for name in _LINE_FIELDS:
            setattr(existing, name, getattr(item, name))
        existing.updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        return existing.id

    async def delete_line_items(self, *, budget_id: int, keep_ids: Optional[Collection[int]] = None) -> int:
        statement = delete(BudgetItem).where(BudgetItem.budget_id == budget_id)
        if keep_ids:
            statement = statement.where(BudgetItem.id.not_in(list(keep_ids)))
        result = await self.db.execute(statement)
        if result.rowcount:
            logger.info(f"[Repo] {result.rowcount} ligne(s) supprimée(s) du budget ID {budget_id}.")
        return result.rowcount or 0

    async def list_budgets(self, *, user_id: Optional[int], offset: int = 0, limit: int = 100) -> Tuple[List[BudgetSummary], int]:
        statement = select(Budget, Client.name, Client.brand).join(Client, Client.id == Budget.client_id)
        count_statement = select(func.count()).select_from(Budget)
        if user_id is not None:
            statement = statement.where(Budget.user_id == user_id)
            count_statement = count_statement.where(Budget.user_id == user_id)
        statement = statement.order_by(Budget.created_at.desc(), Budget.id.desc()).offset(offset).limit(limit)

        result = await self.db.execute(statement)
        items = [
            BudgetSummary(
                id=budget.id,
                client_id=budget.client_id,
                client_name=client_name,
                client_brand=client_brand,
                status=budget.status,
                internal_ref=budget.internal_ref,
                client_ref=budget.client_ref,
                total_amount=budget.total_amount,
                created_at=budget.created_at,
            )
            for budget, client_name, client_brand in result.all()
        ]
        total = await self.db.scalar(count_statement)
        return items, total or 0

    async def list_all_for_user(self, *, user_id: Optional[int]) -> List[Budget]:
        statement = select(Budget)
        if user_id is not None:
            statement = statement.where(Budget.user_id == user_id)
        result = await self.db.execute(statement)
        return list(result.scalars().all())

    async def delete_budget(self, *, budget_id: int) -> bool:
        budget = await self.db.get(Budget, budget_id)
        if budget is None:
            return False
        await self.delete_line_items(budget_id=budget_id)
        await self.db.delete(budget)
        await self.db.flush()
        logger.info(f"[Repo] Budget ID {budget_id} supprimé.")
        return True

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
