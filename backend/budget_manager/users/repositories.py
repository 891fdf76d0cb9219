import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from budget_manager.users.models import User, UserRead
from budget_manager.users.interfaces.repositories import AbstractUserRepository

logger = logging.getLogger(__name__)


class SQLAlchemyUserRepository(AbstractUserRepository):
    """Implémentation SQLAlchemy du dépôt des utilisateurs."""

    def __init__(self, session: AsyncSession):
        self.db = session

    async def get_by_id(self, user_id: int) -> Optional[UserRead]:
        logger.debug(f"[Repo] Récupération User ID: {user_id}")
        user_db = await self.db.get(User, user_id)
        if not user_db:
            logger.warning(f"[Repo] User ID {user_id} non trouvé.")
            return None
        return UserRead.model_validate(user_db)
