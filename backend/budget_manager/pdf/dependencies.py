"""
Dépendances pour le module PDF.
"""
from typing import Annotated

from fastapi import Depends

from budget_manager.pdf.config import PDFSettings, pdf_settings
from budget_manager.pdf.generator import AbstractPDFGenerator
from budget_manager.pdf.reportlab_generator import ReportLabPDFGenerator
from budget_manager.pdf.service import BudgetPDFService
from budget_manager.budgets.dependencies import BudgetServiceDep
from budget_manager.clients.dependencies import ClientRepositoryDep

# --- PDF Settings Dependency ---

def get_pdf_settings() -> PDFSettings:
    """Retourne l'instance globale des paramètres PDF."""
    return pdf_settings

PDFSettingsDep = Annotated[PDFSettings, Depends(get_pdf_settings)]

# --- PDF Generator Dependency ---

def get_pdf_generator(settings: PDFSettingsDep) -> AbstractPDFGenerator:
    """Fournit l'implémentation ReportLab du générateur, avec sa configuration."""
    return ReportLabPDFGenerator(settings=settings)

PDFGeneratorDep = Annotated[AbstractPDFGenerator, Depends(get_pdf_generator)]

# --- PDF Service Dependency ---

def get_pdf_service(
    pdf_generator: PDFGeneratorDep,
    budget_service: BudgetServiceDep,
    client_repo: ClientRepositoryDep,
) -> BudgetPDFService:
    return BudgetPDFService(pdf_generator=pdf_generator, budget_service=budget_service, client_repo=client_repo)

PDFServiceDep = Annotated[BudgetPDFService, Depends(get_pdf_service)]
