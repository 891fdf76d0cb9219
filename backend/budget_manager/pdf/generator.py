from abc import ABC, abstractmethod
from typing import Optional

from budget_manager.pdf.models import PDFBudgetData


class AbstractPDFGenerator(ABC):
    """Interface abstraite pour un générateur de documents PDF.
    Approche orientée données, l'implémentation gère la mise en page.
    """

    @abstractmethod
    async def generate_budget_pdf(
        self,
        budget_data: PDFBudgetData,
        output_path: Optional[str] = None
    ) -> bytes:
        """Génère le PDF récapitulatif d'un budget.

        Args:
            budget_data: Données résolues du budget.
            output_path: Si fourni, sauvegarde le PDF à ce chemin.
                         Sinon, le contenu binaire est uniquement retourné.

        Returns:
            Le contenu binaire du PDF généré.

        Raises:
            PDFGenerationException: Si une erreur survient durant la génération.
        """
        raise NotImplementedError
