"""Exceptions spécifiques au stockage d'objets."""

from typing import Optional


class ObjectStoreException(Exception):
    """Levée lorsqu'un objet ne peut pas être enregistré."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        full_message = f"Erreur de stockage: {message}"
        if original_exception:
            full_message += f" (Erreur originale: {original_exception})"
        super().__init__(full_message)
        self.message = full_message
        self.original_exception = original_exception
