"""
Modèles de données consommés par le générateur PDF.

Toutes les valeurs sont déjà résolues (nom du client, libellés) : le
générateur ne fait aucun accès au stockage.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlmodel import SQLModel, Field

from budget_manager.budgets.models import PricingOption


class PDFBudgetClient(SQLModel):
    name: str = Field(default="Client inconnu", description="Nom du client")
    brand: Optional[str] = Field(default=None, description="Marque du client")
    email: Optional[str] = Field(default=None, description="Email de contact")


class PDFBudgetLine(SQLModel):
    """Ligne de budget telle qu'affichée dans le PDF."""
    description: str = ""
    supplier: str = ""
    quantity: Decimal = Decimal(0)
    unit_label: str = ""
    unit_price: Decimal = Decimal(0)
    line_cost: Decimal = Decimal(0)
    moq_quantity: Optional[int] = None
    lead_time_days: Optional[int] = None


class PDFBudgetData(SQLModel):
    """Données complètes d'un budget pour le PDF."""
    id: int
    created_at: datetime
    status_label: str
    client: PDFBudgetClient
    internal_ref: Optional[str] = None
    client_ref: Optional[str] = None
    collection: Optional[str] = None
    size: Optional[str] = None
    project_start_date: Optional[date] = None
    estimated_end_date: Optional[date] = None
    total_lead_days: int = 0
    materials: List[PDFBudgetLine] = []
    extras: List[PDFBudgetLine] = []
    total_amount: Decimal = Decimal(0)
    pricing_options: List[PricingOption] = []
