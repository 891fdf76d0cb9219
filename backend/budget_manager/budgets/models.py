from typing import Optional, List, Dict, Any
from decimal import Decimal
from datetime import date, datetime, timezone

from pydantic import model_validator
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

from budget_manager.budgets.constants import BudgetStatus, LineItemType, Unit


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

# --- Lignes de budget (matières et extras) ---

class LineItemBase(SQLModel):
    """Champs saisis d'une ligne de budget (matière ou extra)."""
    description: str = Field(default="", max_length=500)
    supplier: str = Field(default="", max_length=255)
    quantity: Decimal = Field(default=Decimal(1), ge=0)
    unit: Unit = Field(default=Unit.UNIT)
    unit_price: Decimal = Field(default=Decimal(0), ge=0)
    has_moq: bool = Field(default=False)
    moq_quantity: Optional[int] = Field(default=None, ge=0)
    lead_time_days: Optional[int] = Field(default=None, ge=0)


class LineItem(LineItemBase):
    """
    Ligne de budget en mémoire.

    line_cost est dérivé (quantity * unit_price) et n'est jamais saisi.
    moq_quantity n'a de sens que lorsque has_moq est vrai.
    """
    id: Optional[int] = None
    type: LineItemType = Field(default=LineItemType.MATERIAL)
    line_cost: Decimal = Field(default=Decimal(0))

    @model_validator(mode="after")
    def clear_moq_without_flag(self) -> "LineItem":
        if not self.has_moq:
            self.moq_quantity = None
        return self


class BudgetItem(LineItemBase, table=True):
    """Modèle de table pour une ligne de budget."""
    __tablename__ = "budget_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    budget_id: int = Field(foreign_key="budgets.id", index=True)
    type: LineItemType = Field(default=LineItemType.MATERIAL, index=True)
    line_cost: Decimal = Field(default=Decimal(0))
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class LineItemWrite(LineItemBase):
    """Schéma d'entrée d'une ligne (id présent pour une ligne déjà enregistrée)."""
    id: Optional[int] = None


class LineItemRead(LineItem):
    id: int

# --- Options de prix ---

class PricingOption(SQLModel):
    """
    Option de prix proposée au client.

    quantity est purement informatif : il est conservé mais n'entre dans
    aucun calcul.
    """
    id: int
    quantity: Decimal = Decimal(1)
    margin_percentage: Decimal
    margin_amount: Decimal = Decimal(0)
    total_cost: Decimal = Decimal(0)
    client_price: Decimal = Decimal(0)


class PricingOptionWrite(SQLModel):
    id: int = Field(..., ge=1, le=3)
    quantity: Decimal = Field(default=Decimal(1), ge=0)
    margin_percentage: Decimal = Field(..., ge=0)

# --- Budget ---

class BudgetFields(SQLModel):
    """Champs libres d'un budget."""
    status: BudgetStatus = Field(default=BudgetStatus.DRAFT)
    internal_ref: Optional[str] = Field(default=None, max_length=100)
    client_ref: Optional[str] = Field(default=None, max_length=100)
    collection: Optional[str] = Field(default=None, max_length=100)
    size: Optional[str] = Field(default=None, max_length=100)
    project_start_date: Optional[date] = None


class Budget(BudgetFields, table=True):
    """Modèle de table pour un budget."""
    __tablename__ = "budgets"

    id: Optional[int] = Field(default=None, primary_key=True)
    client_id: int = Field(foreign_key="clients.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    estimated_end_date: Optional[date] = None
    total_amount: Decimal = Field(default=Decimal(0))
    images: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    pricing_options: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class BudgetDraft(BudgetFields):
    """En-tête d'un budget en cours d'édition (id absent tant qu'il n'est pas enregistré)."""
    id: Optional[int] = None
    client_id: Optional[int] = None
    user_id: Optional[int] = None
    estimated_end_date: Optional[date] = None
    images: List[str] = Field(default_factory=list)


class BudgetWrite(BudgetFields):
    """Schéma d'entrée complet pour créer ou remplacer un budget."""
    client_id: int = Field(..., ge=1)
    # Images initiales : ignorées lors d'un remplacement, les images enregistrées sont conservées
    images: List[str] = Field(default_factory=list)
    materials: List[LineItemWrite] = Field(default_factory=list)
    extras: List[LineItemWrite] = Field(default_factory=list)
    pricing_options: Optional[List[PricingOptionWrite]] = None
    # Relance le calcul de la date de fin même si la date de début est inchangée
    recompute_end_date: bool = False


class BudgetStatusUpdate(SQLModel):
    # Validé par le service (InvalidBudgetStatusException)
    status: str


class BudgetRead(BudgetFields):
    """Schéma pour lire un budget complet depuis l'API."""
    id: int
    client_id: int
    user_id: int
    estimated_end_date: Optional[date] = None
    total_amount: Decimal
    total_lead_days: int
    images: List[str] = []
    pricing_options: List[PricingOption] = []
    materials: List[LineItemRead] = []
    extras: List[LineItemRead] = []
    created_at: datetime
    updated_at: datetime


class BudgetPreview(SQLModel):
    """Résultat des calculs d'un budget non enregistré."""
    total_amount: Decimal
    total_lead_days: int
    project_start_date: Optional[date] = None
    estimated_end_date: Optional[date] = None
    materials: List[LineItem] = []
    extras: List[LineItem] = []
    pricing_options: List[PricingOption] = []


class BudgetSummary(SQLModel):
    """Ligne de liste des budgets (avec le client résolu)."""
    id: int
    client_id: int
    client_name: str
    client_brand: Optional[str] = None
    status: BudgetStatus
    internal_ref: Optional[str] = None
    client_ref: Optional[str] = None
    total_amount: Decimal
    created_at: datetime


class PaginatedBudgetSummary(SQLModel):
    items: List[BudgetSummary]
    total: int


class PendingImage(SQLModel):
    """Image ajoutée au formulaire mais pas encore envoyée au stockage."""
    filename: str
    content: bytes
    content_type: Optional[str] = None
