import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from budget_manager.database import get_db_session
from budget_manager.users.interfaces.repositories import AbstractUserRepository
from budget_manager.users.repositories import SQLAlchemyUserRepository

logger = logging.getLogger(__name__)


def get_user_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> AbstractUserRepository:
    """Fournit une instance du repository utilisateur (implémentation SQLAlchemy)."""
    logger.debug("Fourniture de SQLAlchemyUserRepository")
    return SQLAlchemyUserRepository(session=session)

UserRepositoryDep = Annotated[AbstractUserRepository, Depends(get_user_repository)]
