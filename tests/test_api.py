from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from profiteer.app import app
from profiteer.engine import LedgerEngine


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        app.state.engine = LedgerEngine(default_currency="USD")
        yield test_client


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "default_currency": "USD"}


def test_engine_missing_returns_500() -> None:
    local_client = TestClient(app)
    had_engine = hasattr(app.state, "engine")
    original = getattr(app.state, "engine", None)
    if had_engine:
        delattr(app.state, "engine")
    try:
        response = local_client.get("/health")
    finally:
        if had_engine:
            app.state.engine = original
    assert response.status_code == 500


def test_wallet_balance(client: TestClient) -> None:
    payload = {
        "transactions": [
            {"id": "t1", "type": "INCOME", "amount": "1000", "affected_wallet_ids": ["phys", "log"]},
            {"id": "t2", "type": "TRANSFER", "amount": "750", "source_wallet_id": "phys", "destination_wallet_id": "log"},
        ]
    }
    response = client.post("/api/wallets/log/balance", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["wallet_id"] == "log"
    assert float(data["income"]) == 1750
    assert float(data["expense"]) == 0
    assert float(data["net"]) == 1750


def test_wallet_summary(client: TestClient) -> None:
    payload = {
        "transactions": [
            {"id": "t1", "type": "EXPENSE", "amount": "20", "wallet_id": "cash"},
            {"id": "t2", "type": "TRANSFER", "amount": "5", "source_wallet_id": "bank", "destination_wallet_id": "cash"},
        ]
    }
    response = client.post("/api/wallets/cash/summary", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["transaction_count"] == 2
    assert data["expense_count"] == 1
    assert data["incoming_transfer_count"] == 1
    assert float(data["net_change"]) == -15


def test_invalid_transfer_is_422(client: TestClient) -> None:
    payload = {
        "transactions": [
            {"id": "loop", "type": "TRANSFER", "amount": "5", "source_wallet_id": "a", "destination_wallet_id": "a"},
        ]
    }
    response = client.post("/api/wallets/a/balance", json=payload)
    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_TRANSACTION"


def test_unknown_transaction_type_fails_validation(client: TestClient) -> None:
    payload = {"transactions": [{"id": "x", "type": "REFUND", "amount": "5", "wallet_id": "a"}]}
    response = client.post("/api/wallets/a/balance", json=payload)
    assert response.status_code == 422


def test_resolve_rate(client: TestClient) -> None:
    payload = {
        "from_currency": "EUR",
        "to_currency": "USD",
        "period": "2024-03",
        "rates": [
            {"from_currency": "EUR", "to_currency": "USD", "rate": "1.10"},
            {"from_currency": "EUR", "to_currency": "USD", "rate": "1.20", "month": "2024-03"},
        ],
    }
    response = client.post("/api/rates/resolve", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["available"] is True
    assert data["source"] == "monthly"
    assert float(data["factor"]) == 1.2
    assert data["rate"]["month"] == "2024-03"


def test_resolve_rate_unavailable(client: TestClient) -> None:
    payload = {"from_currency": "EUR", "to_currency": "IDR", "rates": []}
    response = client.post("/api/rates/resolve", json=payload)
    assert response.status_code == 200
    assert response.json() == {
        "available": False,
        "from_currency": "EUR",
        "to_currency": "IDR",
        "period": None,
    }


def test_portfolio(client: TestClient) -> None:
    payload = {
        "wallets": [
            {"id": "a", "name": "Checking", "currency": "USD"},
            {"id": "b", "name": "Yen", "currency": "JPY"},
        ],
        "transactions": [
            {"id": "t1", "type": "INCOME", "amount": "500", "affected_wallet_ids": ["a"]},
            {"id": "t2", "type": "INCOME", "amount": "9000", "affected_wallet_ids": ["b"]},
        ],
        "rates": [],
    }
    response = client.post("/api/portfolio", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["currency"] == "USD"
    assert float(data["total"]) == 500
    assert data["unresolved_wallet_ids"] == ["b"]
    assert data["excluded_wallet_count"] == 1


def test_portfolio_unknown_default_currency(client: TestClient) -> None:
    response = client.post("/api/portfolio", json={"default_currency": "ZZZ"})
    assert response.status_code == 422
    assert response.json()["code"] == "UNKNOWN_CURRENCY"


def test_discrepancies(client: TestClient) -> None:
    payload = {
        "wallets": [
            {"id": "bank", "currency": "USD", "wallet_type": "Physical", "balance": "70"},
            {"id": "budget", "currency": "USD", "wallet_type": "Logical", "balance": "100"},
        ],
        "transactions": [
            {"id": "t1", "type": "INCOME", "amount": "100", "affected_wallet_ids": ["bank", "budget"], "transaction_date": "2024-01-01T10:00:00"},
            {"id": "t2", "type": "EXPENSE", "amount": "30", "affected_wallet_ids": ["bank"], "transaction_date": "2024-01-02T10:00:00"},
        ],
    }
    response = client.post("/api/portfolio/discrepancies", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["has_discrepancy"] is True
    assert data["first_discrepancy_id"] == "t2"
    assert [entry["transaction"]["id"] for entry in data["running_balances"]] == ["t2", "t1"]


def test_currencies(client: TestClient) -> None:
    response = client.get("/api/currencies", params={"category": "cryptocurrency"})
    assert response.status_code == 200
    codes = {item["code"] for item in response.json()}
    assert codes == {"BTC", "ETH", "ADA", "DOT", "SOL", "MATIC"}

    response = client.get("/api/currencies/jpy")
    assert response.status_code == 200
    assert response.json()["decimal_places"] == 0

    response = client.get("/api/currencies/XYZ")
    assert response.status_code == 404


def test_discrepancies_with_utc_and_undated_transactions(client: TestClient) -> None:
    payload = {
        "wallets": [
            {"id": "bank", "currency": "USD", "wallet_type": "Physical", "balance": "70"},
            {"id": "budget", "currency": "USD", "wallet_type": "Logical", "balance": "100"},
        ],
        "transactions": [
            {"id": "t1", "type": "INCOME", "amount": "100", "affected_wallet_ids": ["bank", "budget"], "transaction_date": "2024-01-01T00:00:00Z"},
            {"id": "t2", "type": "EXPENSE", "amount": "30", "affected_wallet_ids": ["bank"], "transaction_date": "2024-01-02T09:00:00+07:00"},
            {"id": "t3", "type": "INCOME", "amount": "0", "affected_wallet_ids": ["bank", "budget"]},
        ],
    }
    response = client.post("/api/portfolio/discrepancies", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["first_discrepancy_id"] == "t2"
    assert [entry["transaction"]["id"] for entry in data["running_balances"]] == ["t2", "t1", "t3"]
