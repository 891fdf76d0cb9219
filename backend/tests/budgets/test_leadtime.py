from datetime import date
from decimal import Decimal

import pytest

from budget_manager.budgets.constants import DEFAULT_LEAD_TIME_DAYS, LineItemType
from budget_manager.budgets.leadtime import project_end_date, total_lead_days
from budget_manager.budgets.models import LineItem

MONDAY = date(2024, 1, 1)
FRIDAY = date(2024, 1, 5)


def test_friday_plus_one_business_day_is_monday():
    assert project_end_date(FRIDAY, 1) == date(2024, 1, 8)


def test_zero_days_returns_start_date():
    assert project_end_date(MONDAY, 0) == MONDAY


def test_ten_business_days_from_monday_lands_two_mondays_later():
    assert project_end_date(MONDAY, 10) == date(2024, 1, 15)


def test_start_on_saturday_counts_from_monday():
    saturday = date(2024, 1, 6)
    assert project_end_date(saturday, 1) == date(2024, 1, 8)


@pytest.mark.parametrize("days", [1, 5, 7, 23, 42])
def test_end_date_never_falls_on_weekend(days):
    assert project_end_date(MONDAY, days).weekday() < 5


def test_total_lead_days_sums_materials_and_extras():
    materials = [LineItem(lead_time_days=5), LineItem(lead_time_days=None), LineItem(lead_time_days=3)]
    extras = [LineItem(lead_time_days=2, type=LineItemType.EXTRA)]
    assert total_lead_days(materials, extras) == 10


def test_total_lead_days_falls_back_when_nothing_set():
    assert total_lead_days([LineItem(quantity=Decimal(1))], []) == DEFAULT_LEAD_TIME_DAYS
    assert total_lead_days([], []) == 42


def test_total_lead_days_custom_fallback():
    assert total_lead_days([], [], fallback=7) == 7


def test_empty_budget_uses_fallback_for_end_date():
    # 42 jours ouvrés : 8 semaines plus 2 jours
    assert project_end_date(MONDAY, total_lead_days([], [])) == date(2024, 2, 28)
