from abc import ABC, abstractmethod
from typing import Optional


class AbstractObjectStore(ABC):
    """Interface abstraite d'un stockage d'objets (images des budgets)."""

    @abstractmethod
    async def upload(self, filename: str, content: bytes, content_type: Optional[str] = None) -> str:
        """Enregistre le contenu sous un nom aléatoire (extension de filename conservée).

        Returns:
            L'URL publique de l'objet enregistré.

        Raises:
            ObjectStoreException: Si l'écriture échoue.
        """
        raise NotImplementedError
