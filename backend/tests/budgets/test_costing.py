from decimal import Decimal

from budget_manager.budgets.constants import LineItemType
from budget_manager.budgets.costing import recompute_line_cost, total_material_cost
from budget_manager.budgets.models import LineItem


def test_recompute_line_cost_multiplies_quantity_by_unit_price():
    item = LineItem(quantity=Decimal("2.5"), unit_price=Decimal("4"))
    result = recompute_line_cost(item)
    assert result.line_cost == Decimal("10.0")


def test_recompute_line_cost_does_not_round():
    item = LineItem(quantity=Decimal("3"), unit_price=Decimal("0.333"))
    assert recompute_line_cost(item).line_cost == Decimal("0.999")


def test_recompute_line_cost_returns_a_copy():
    item = LineItem(quantity=Decimal("2"), unit_price=Decimal("5"))
    result = recompute_line_cost(item)
    assert result is not item
    assert item.line_cost == Decimal(0)


def test_recompute_line_cost_with_zero_quantity():
    item = LineItem(quantity=Decimal(0), unit_price=Decimal("99.90"))
    assert recompute_line_cost(item).line_cost == Decimal(0)


def test_total_material_cost_ignores_extras():
    lines = [
        recompute_line_cost(LineItem(quantity=Decimal(2), unit_price=Decimal(10))),
        recompute_line_cost(LineItem(quantity=Decimal(1), unit_price=Decimal(5), type=LineItemType.EXTRA)),
        recompute_line_cost(LineItem(quantity=Decimal(3), unit_price=Decimal(1))),
    ]
    assert total_material_cost(lines) == Decimal(23)


def test_total_material_cost_of_nothing_is_zero():
    assert total_material_cost([]) == Decimal(0)


def test_moq_quantity_cleared_without_flag():
    item = LineItem(has_moq=False, moq_quantity=500)
    assert item.moq_quantity is None
    assert LineItem(has_moq=True, moq_quantity=500).moq_quantity == 500
