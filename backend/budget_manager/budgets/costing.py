"""
Calcul du coût des lignes de budget.
"""
from decimal import Decimal
from typing import Iterable

from budget_manager.budgets.constants import LineItemType
from budget_manager.budgets.models import LineItem


def recompute_line_cost(item: LineItem) -> LineItem:
    """Retourne une copie de la ligne avec line_cost = quantity * unit_price (sans arrondi)."""
    return item.model_copy(update={"line_cost": item.quantity * item.unit_price})


def total_material_cost(materials: Iterable[LineItem]) -> Decimal:
    """Somme des coûts des matières. Les extras n'entrent jamais dans le coût de base."""
    return sum(
        (item.line_cost for item in materials if item.type == LineItemType.MATERIAL),
        Decimal(0),
    )
