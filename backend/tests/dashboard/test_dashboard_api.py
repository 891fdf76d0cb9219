from decimal import Decimal

import pytest
from httpx import AsyncClient

from budget_manager.config import settings

pytestmark = pytest.mark.asyncio


async def test_dashboard_empty(test_client: AsyncClient, auth_headers_user: dict[str, str]):
    response = await test_client.get(f"{settings.API_V1_PREFIX}/dashboard", headers=auth_headers_user)
    assert response.status_code == 200
    data = response.json()
    assert data["total_budgets"] == 0
    assert data["total_clients"] == 0
    assert Decimal(data["total_amount"]) == Decimal(0)
    assert data["status_counts"] == {"draft": 0, "sent": 0, "approved": 0, "rejected": 0}
    assert data["recent_budgets"] == []


async def test_dashboard_stats(test_client: AsyncClient, auth_headers_user: dict[str, str], auth_headers_user_2: dict[str, str], test_client_record):
    client_id = test_client_record.id
    budgets_url = f"{settings.API_V1_PREFIX}/budgets"
    ids = []
    for price in ("10", "20", "30", "40", "50", "60"):
        payload = {"client_id": client_id, "materials": [{"description": "Tissu", "quantity": "1", "unit_price": price}]}
        response = await test_client.post(budgets_url, json=payload, headers=auth_headers_user)
        ids.append(response.json()["id"])
    await test_client.patch(f"{budgets_url}/{ids[0]}/status", json={"status": "approved"}, headers=auth_headers_user)

    response = await test_client.get(f"{settings.API_V1_PREFIX}/dashboard", headers=auth_headers_user)
    data = response.json()
    assert data["total_budgets"] == 6
    assert data["total_clients"] == 1
    assert Decimal(data["total_amount"]) == Decimal(210)
    assert data["status_counts"]["draft"] == 5
    assert data["status_counts"]["approved"] == 1
    assert len(data["recent_budgets"]) == 5

    other = (await test_client.get(f"{settings.API_V1_PREFIX}/dashboard", headers=auth_headers_user_2)).json()
    assert other["total_budgets"] == 0
