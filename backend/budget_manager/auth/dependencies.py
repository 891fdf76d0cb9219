"""
Dépendances FastAPI pour l'authentification.

Fournit l'utilisateur courant (principal) à partir du token JWT Bearer.
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from budget_manager.config import settings
from budget_manager.auth.security import decode_access_token
from budget_manager.auth.exceptions import TokenMissingException, TokenInvalidException
from budget_manager.users.models import UserRead
from budget_manager.users.dependencies import UserRepositoryDep

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=settings.OAUTH2_TOKEN_URL, auto_error=False)


async def get_current_user(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    user_repository: UserRepositoryDep,
) -> UserRead:
    """
    Vérifie le token JWT et retourne l'utilisateur courant.

    Raises:
        TokenMissingException: Si le token est manquant
        TokenInvalidException: Si le token est invalide ou l'utilisateur inconnu
    """
    if token is None:
        logger.warning("Token manquant dans la requête.")
        raise TokenMissingException()

    user_id = decode_access_token(token)
    if user_id is None:
        raise TokenInvalidException()

    user = await user_repository.get_by_id(user_id)
    if user is None:
        logger.warning(f"Token valide mais utilisateur ID {user_id} inconnu.")
        raise TokenInvalidException()

    logger.debug(f"Utilisateur authentifié: ID {user.id}")
    return user


CurrentUserDep = Annotated[UserRead, Depends(get_current_user)]