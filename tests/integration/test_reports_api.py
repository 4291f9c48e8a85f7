"""Integration tests for admin report endpoints"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

REPORT_PATHS = [
    "/api/admin/revenue/total",
    "/api/admin/revenue/category",
    "/api/admin/expenses/total",
    "/api/admin/profit/total",
    "/api/admin/profit/margin",
    "/api/admin/cashflow",
]


@pytest.mark.parametrize("path", REPORT_PATHS)
def test_reports_require_session(client: TestClient, add_transaction, path: str):
    """No session: 401 and nothing but the error in the body"""
    add_transaction(500, "income")

    response = client.get(path)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


@pytest.mark.parametrize("path", REPORT_PATHS)
def test_reports_reject_customer_role(client: TestClient, customer_headers, path: str):
    response = client.get(path, headers=customer_headers)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_reports_reject_invalid_token(client: TestClient):
    response = client.get("/api/admin/revenue/total", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_reports_reject_user_without_profile(client: TestClient, create_user, headers_for):
    create_user("no-profile", "someone@example.com")

    response = client.get("/api/admin/revenue/total", headers=headers_for("no-profile"))

    assert response.status_code == 401


def test_role_lookup_failure_denies(client: TestClient, admin_headers):
    """Fail closed when the role cannot be read"""
    with patch(
        "storefront_gateway.infrastructure.database.repositories.ProfileRepository.get_role",
        side_effect=OperationalError("SELECT", {}, Exception("connection lost")),
    ):
        response = client.get("/api/admin/revenue/total", headers=admin_headers)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_super_admin_allowed(client: TestClient, create_user, headers_for):
    create_user("root", "root@example.com", role="super_admin")

    response = client.get("/api/admin/revenue/total", headers=headers_for("root"))

    assert response.status_code == 200


def test_session_cookie_accepted(client: TestClient, admin_headers):
    token = admin_headers["Authorization"].split(" ", 1)[1]
    response = client.get("/api/admin/revenue/total", headers={"Cookie": f"sb-access-token={token}"})

    assert response.status_code == 200


def test_profit_total_excludes_pending(client: TestClient, admin_headers, add_transaction):
    add_transaction(500, "income")
    add_transaction(200, "expense")
    add_transaction(100, "expense", status="pending")

    response = client.get("/api/admin/profit/total", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"totalProfit": 300}


def test_empty_transaction_set(client: TestClient, admin_headers):
    assert client.get("/api/admin/revenue/total", headers=admin_headers).json() == {"totalRevenue": 0}
    assert client.get("/api/admin/expenses/total", headers=admin_headers).json() == {"totalExpenses": 0}
    assert client.get("/api/admin/profit/total", headers=admin_headers).json() == {"totalProfit": 0}
    assert client.get("/api/admin/revenue/category", headers=admin_headers).json() == {"revenueByCategory": {}}
    assert client.get("/api/admin/cashflow", headers=admin_headers).json() == {"cashFlow": {}}
    assert client.get("/api/admin/profit/margin", headers=admin_headers).json() == {"profitMargin": []}


def test_revenue_and_expense_totals(client: TestClient, admin_headers, add_transaction):
    add_transaction(Decimal("120.50"), "income")
    add_transaction(Decimal("79.50"), "income")
    add_transaction(Decimal("30.25"), "expense")
    add_transaction(Decimal("1000"), "income", status="failed")

    assert client.get("/api/admin/revenue/total", headers=admin_headers).json() == {"totalRevenue": 200.0}
    assert client.get("/api/admin/expenses/total", headers=admin_headers).json() == {"totalExpenses": 30.25}


def test_reports_only_include_callers_rows(client: TestClient, admin_headers, add_transaction):
    add_transaction(100, "income")
    add_transaction(900, "income", user_uid="someone-else")

    response = client.get("/api/admin/revenue/total", headers=admin_headers)

    assert response.json() == {"totalRevenue": 100}


def test_revenue_by_category(client: TestClient, admin_headers, add_transaction):
    add_transaction(100, "income", category="repairs")
    add_transaction(50, "income", category="repairs")
    add_transaction(25, "income", category="shipping")
    add_transaction(999, "income", category=None)
    add_transaction(10, "expense", category="parts")

    response = client.get("/api/admin/revenue/category", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"revenueByCategory": {"repairs": 150, "shipping": 25}}


def test_cashflow_by_day(client: TestClient, admin_headers, add_transaction):
    day_1 = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)
    day_2 = datetime(2025, 3, 2, 10, 0, tzinfo=timezone.utc)
    add_transaction(500, "income", created_at=day_1)
    add_transaction(200, "expense", created_at=day_1)
    add_transaction(50, "expense", created_at=day_2)

    response = client.get("/api/admin/cashflow", headers=admin_headers)

    assert response.json() == {"cashFlow": {"2025-03-01": 300, "2025-03-02": -50}}


def test_profit_margin(client: TestClient, admin_headers, add_transaction):
    day_1 = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)
    day_2 = datetime(2025, 3, 2, 10, 0, tzinfo=timezone.utc)
    add_transaction(300, "income", created_at=day_2)
    add_transaction(100, "expense", created_at=day_2)
    add_transaction(80, "expense", created_at=day_1)

    response = client.get("/api/admin/profit/margin", headers=admin_headers)

    assert response.json() == {
        "profitMargin": [
            {"date": "2025-03-01", "margin": 0},
            {"date": "2025-03-02", "margin": 66.67},
        ]
    }


def test_database_failure_returns_generic_500(client: TestClient, admin_headers):
    with patch(
        "storefront_gateway.infrastructure.database.repositories.TransactionRepository.get_completed",
        side_effect=OperationalError("SELECT", {}, Exception("relation does not exist")),
    ):
        response = client.get("/api/admin/revenue/total", headers=admin_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch transactions"}
