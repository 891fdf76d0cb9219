"""Exceptions spécifiques au module PDF."""

from typing import Optional


class PDFDomainException(Exception):
    """Classe de base pour les exceptions du module PDF."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class PDFGenerationException(PDFDomainException):
    """Levée lorsqu'une erreur survient pendant la génération d'un PDF."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        full_message = f"Erreur lors de la génération du PDF: {message}"
        if original_exception:
            full_message += f" (Erreur originale: {original_exception})"
        super().__init__(full_message)
        self.original_exception = original_exception
