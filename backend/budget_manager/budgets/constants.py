"""
Constantes du module Budgets.
"""
from decimal import Decimal
from enum import Enum


class BudgetStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"


class LineItemType(str, Enum):
    MATERIAL = "material"
    EXTRA = "extra"


class Unit(str, Enum):
    UNIT = "uni"
    METER = "mt"
    KILOGRAM = "kg"
    THOUSAND = "mil"  # lot de mille unités


UNIT_LABELS = {
    Unit.UNIT: "Uni",
    Unit.METER: "Mt",
    Unit.KILOGRAM: "Kg",
    Unit.THOUSAND: "Milheiro",
}

STATUS_LABELS = {
    BudgetStatus.DRAFT: "Brouillon",
    BudgetStatus.SENT: "Envoyé",
    BudgetStatus.APPROVED: "Approuvé",
    BudgetStatus.REJECTED: "Rejeté",
}

# Marges des trois options de prix proposées au client
DEFAULT_MARGIN_PERCENTAGES = (Decimal(10), Decimal(15), Decimal(20))

# Délai utilisé quand aucune ligne ne renseigne de délai (6 semaines ouvrées)
DEFAULT_LEAD_TIME_DAYS = 42

RECENT_BUDGETS_LIMIT = 5
