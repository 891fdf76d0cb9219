"""
Calcul des trois options de prix proposées au client à partir du coût des matières.
"""
from decimal import Decimal
from typing import List, Sequence

from budget_manager.budgets.constants import DEFAULT_MARGIN_PERCENTAGES
from budget_manager.budgets.models import PricingOption


def default_pricing_options() -> List[PricingOption]:
    """Les trois options initiales (marges 10/15/20), valeurs dérivées à zéro."""
    return [
        PricingOption(id=index, quantity=Decimal(1), margin_percentage=margin)
        for index, margin in enumerate(DEFAULT_MARGIN_PERCENTAGES, start=1)
    ]


def recalculate_tier(tier: PricingOption, base_cost: Decimal) -> PricingOption:
    margin_amount = base_cost * tier.margin_percentage / Decimal(100)
    total_cost = base_cost + margin_amount
    return tier.model_copy(update={
        "margin_amount": margin_amount,
        "total_cost": total_cost,
        "client_price": total_cost,
    })


def recalculate_tiers(tiers: Sequence[PricingOption], base_cost: Decimal) -> List[PricingOption]:
    return [recalculate_tier(tier, base_cost) for tier in tiers]
