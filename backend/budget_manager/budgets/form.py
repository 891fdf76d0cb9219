from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterator, List, Optional, Sequence

from budget_manager.budgets.constants import LineItemType
from budget_manager.budgets.costing import recompute_line_cost, total_material_cost
from budget_manager.budgets.exceptions import BudgetSaveInProgressException, BudgetValidationException
from budget_manager.budgets.leadtime import project_end_date, total_lead_days
from budget_manager.budgets.models import (
    BudgetDraft, LineItem, LineItemBase, PendingImage, PricingOption
)
from budget_manager.budgets.pricing import default_pricing_options, recalculate_tier, recalculate_tiers

_EDITABLE_LINE_FIELDS = frozenset(LineItemBase.model_fields)


class BudgetForm:
    """
    Session d'édition d'un budget en mémoire.

    Chaque mutateur applique sa règle de recalcul :
    - modification d'une matière : coût de la ligne puis les trois options de prix ;
    - modification d'un extra : coût de la ligne uniquement ;
    - modification d'une option : cette option seule, avec le coût de base courant ;
    - saisie de la date de début : date de fin estimée.

    La date de fin n'est pas recalculée quand les délais des lignes changent ;
    il faut ressaisir la date de début.
    """

    def __init__(
        self,
        budget: Optional[BudgetDraft] = None,
        materials: Optional[Sequence[LineItemBase]] = None,
        extras: Optional[Sequence[LineItemBase]] = None,
        pricing_options: Optional[Sequence[PricingOption]] = None,
        today_provider: Callable[[], date] = date.today,
    ):
        self.budget = budget or BudgetDraft()
        self.materials: List[LineItem] = [self._new_line(LineItemType.MATERIAL, item) for item in materials or []]
        self.extras: List[LineItem] = [self._new_line(LineItemType.EXTRA, item) for item in extras or []]
        self.pricing_options: List[PricingOption] = recalculate_tiers(
            list(pricing_options) if pricing_options else default_pricing_options(),
            self.total_amount,
        )
        self.pending_images: List[PendingImage] = []
        self._today = today_provider
        self._saving = False

    # --- Valeurs dérivées ---

    @property
    def total_amount(self) -> Decimal:
        return total_material_cost(self.materials)

    @property
    def total_lead_days(self) -> int:
        return total_lead_days(self.materials, self.extras)

    @property
    def is_new(self) -> bool:
        return self.budget.id is None

    @property
    def is_saving(self) -> bool:
        return self._saving

    # --- Matières ---

    def add_material(self, item: Optional[LineItemBase] = None) -> int:
        """Ajoute une matière (vierge si item est None) et retourne son index."""
        self.materials.append(self._new_line(LineItemType.MATERIAL, item))
        self._recalculate_all_tiers()
        return len(self.materials) - 1

    def update_material(self, index: int, **changes: Any) -> LineItem:
        self.materials[index] = self._edit_line(self.materials[index], changes)
        self._recalculate_all_tiers()
        return self.materials[index]

    def remove_material(self, index: int) -> LineItem:
        removed = self.materials.pop(index)
        self._recalculate_all_tiers()
        return removed

    # --- Extras (n'entrent jamais dans le coût de base) ---

    def add_extra(self, item: Optional[LineItemBase] = None) -> int:
        self.extras.append(self._new_line(LineItemType.EXTRA, item))
        return len(self.extras) - 1

    def update_extra(self, index: int, **changes: Any) -> LineItem:
        self.extras[index] = self._edit_line(self.extras[index], changes)
        return self.extras[index]

    def remove_extra(self, index: int) -> LineItem:
        return self.extras.pop(index)

    # --- Options de prix ---

    def update_pricing_option(
        self,
        option_id: int,
        margin_percentage: Optional[Decimal] = None,
        quantity: Optional[Decimal] = None,
    ) -> PricingOption:
        """Modifie la marge ou la quantité (informative) d'une option et recalcule cette option."""
        for position, option in enumerate(self.pricing_options):
            if option.id != option_id:
                continue
            changes = {}
            if margin_percentage is not None:
                changes["margin_percentage"] = Decimal(margin_percentage)
            if quantity is not None:
                changes["quantity"] = Decimal(quantity)
            self.pricing_options[position] = recalculate_tier(option.model_copy(update=changes), self.total_amount)
            return self.pricing_options[position]
        raise BudgetValidationException([f"Option de prix {option_id} inconnue."])

    # --- Dates ---

    def set_start_date_today(self) -> Optional[date]:
        return self.set_start_date(self._today())

    def set_start_date(self, start_date: Optional[date]) -> Optional[date]:
        """Enregistre la date de début et recalcule la date de fin (effacée si la date est vide)."""
        self.budget.project_start_date = start_date
        if start_date is None:
            self.budget.estimated_end_date = None
        else:
            self.budget.estimated_end_date = project_end_date(start_date, self.total_lead_days)
        return self.budget.estimated_end_date

    # --- Images ---

    def add_pending_image(self, filename: str, content: bytes, content_type: Optional[str] = None) -> int:
        self.pending_images.append(PendingImage(filename=filename, content=content, content_type=content_type))
        return len(self.pending_images) - 1

    def remove_pending_image(self, index: int) -> PendingImage:
        return self.pending_images.pop(index)

    # --- Garde contre la double soumission ---

    @contextmanager
    def saving(self) -> Iterator["BudgetForm"]:
        if self._saving:
            raise BudgetSaveInProgressException()
        self._saving = True
        try:
            yield self
        finally:
            self._saving = False

    # --- Interne ---

    def _recalculate_all_tiers(self) -> None:
        self.pricing_options = recalculate_tiers(self.pricing_options, self.total_amount)

    @staticmethod
    def _new_line(line_type: LineItemType, item: Optional[LineItemBase]) -> LineItem:
        data = item.model_dump() if item is not None else {}
        data.pop("line_cost", None)
        data["type"] = line_type
        return recompute_line_cost(LineItem.model_validate(data))

    @staticmethod
    def _edit_line(item: LineItem, changes: dict) -> LineItem:
        unknown = set(changes) - _EDITABLE_LINE_FIELDS
        if unknown:
            raise BudgetValidationException([f"Champ '{name}' non modifiable." for name in sorted(unknown)])
        data = item.model_dump()
        data.update(changes)
        edited = LineItem.model_validate(data)
        if "quantity" in changes or "unit_price" in changes:
            edited = recompute_line_cost(edited)
        return edited
