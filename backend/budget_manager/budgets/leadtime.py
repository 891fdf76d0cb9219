"""
Projection des délais de fabrication sur un calendrier de jours ouvrés.

Les jours fériés ne sont pas pris en compte : seuls samedi et dimanche sont
exclus.
"""
from datetime import date, timedelta
from typing import Iterable

from budget_manager.budgets.constants import DEFAULT_LEAD_TIME_DAYS
from budget_manager.budgets.models import LineItem

# date.weekday(): lundi = 0 ... dimanche = 6
_WEEKEND = (5, 6)


def total_lead_days(
    materials: Iterable[LineItem],
    extras: Iterable[LineItem],
    fallback: int = DEFAULT_LEAD_TIME_DAYS,
) -> int:
    """Somme des délais de toutes les lignes ; si elle est nulle, retourne le délai par défaut."""
    total = 0
    for item in list(materials) + list(extras):
        total += item.lead_time_days or 0
    return total if total > 0 else fallback


def project_end_date(start_date: date, lead_days: int) -> date:
    """
    Avance jour par jour depuis le lendemain de start_date en ne comptant que
    les jours du lundi au vendredi, jusqu'à atteindre lead_days.

    Aucun délai par défaut ici : lead_days = 0 retourne start_date. Pour
    bénéficier du repli sur 42 jours, passer la valeur de total_lead_days().
    """
    current = start_date
    counted = 0
    while counted < lead_days:
        current += timedelta(days=1)
        if current.weekday() not in _WEEKEND:
            counted += 1
    return current
