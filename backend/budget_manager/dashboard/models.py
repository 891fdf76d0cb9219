from decimal import Decimal
from typing import Dict, List

from sqlmodel import SQLModel

from budget_manager.budgets.models import BudgetSummary


class DashboardStats(SQLModel):
    """Statistiques du tableau de bord de l'utilisateur courant."""
    total_budgets: int = 0
    total_clients: int = 0
    total_amount: Decimal = Decimal(0)
    status_counts: Dict[str, int] = {}
    recent_budgets: List[BudgetSummary] = []
