"""
Tests for the HTTP API: routing, error envelope and status mapping
"""

import pytest
from decimal import Decimal
from uuid import uuid4
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from elitestock.core.trading.models import CopyStatus
from elitestock.core.transactions.models import TransactionType
from elitestock.services.ledger import get_balance


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready_checks_database(client: TestClient):
    response = client.get("/ready")
    assert response.status_code == 200
    body = response.json()
    assert body["database"] == "connected"
    assert body["redis"] == "not_required"


def test_trace_id_is_echoed_in_header_and_errors(client: TestClient):
    response = client.get(f"/api/v1/users/{uuid4()}/trades", headers={"X-Trace-ID": "trace-abc"})

    assert response.status_code == 404
    assert response.headers["X-Trace-ID"] == "trace-abc"
    error = response.json()["error"]
    assert error["code"] == "NOT_FOUND"
    assert error["trace_id"] == "trace-abc"


def test_request_validation_error_envelope(client: TestClient):
    response = client.post("/api/v1/trades", json={"user_id": "not-a-uuid", "amount": "-1"})

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert isinstance(error["details"], list)
    assert error["trace_id"]


def test_place_trade_executes(client: TestClient, db_session: Session, make_user, asset):
    user = make_user(balance="1000")

    response = client.post("/api/v1/trades", json={
        "user_id": str(user.id),
        "asset_id": str(asset.id),
        "type": "buy",
        "amount": "2",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["executed"] is True
    assert body["trade"]["status"] == "executed"
    assert Decimal(body["trade"]["price"]) == Decimal("50")
    assert get_balance(db=db_session, user_id=user.id) == Decimal("900")

    listed = client.get(f"/api/v1/users/{user.id}/trades", params={"status": "executed"})
    assert listed.status_code == 200
    assert [t["id"] for t in listed.json()] == [body["trade"]["id"]]


def test_place_trade_insufficient_funds_returns_402(client: TestClient, db_session: Session, make_user, asset):
    user = make_user(balance="40")

    response = client.post("/api/v1/trades", json={
        "user_id": str(user.id),
        "asset_id": str(asset.id),
        "type": "buy",
        "amount": "1",
        "price": "50",
    })

    assert response.status_code == 402
    error = response.json()["error"]
    assert error["code"] == "INSUFFICIENT_FUNDS"
    assert Decimal(error["details"]["balance"]) == Decimal("40")
    assert Decimal(error["details"]["required"]) == Decimal("50")
    assert get_balance(db=db_session, user_id=user.id) == Decimal("40")

    pending = client.get(f"/api/v1/users/{user.id}/trades", params={"status": "pending"}).json()
    assert len(pending) == 1

    # Funds arrive, the pending trade can be executed
    user.balance = Decimal("100")
    db_session.commit()
    executed = client.post(f"/api/v1/trades/{pending[0]['id']}/execute")
    assert executed.status_code == 200
    assert executed.json()["executed"] is True

    again = client.post(f"/api/v1/trades/{pending[0]['id']}/execute")
    assert again.json()["executed"] is False
    assert get_balance(db=db_session, user_id=user.id) == Decimal("50")


def test_copy_relationship_lifecycle(client: TestClient, make_user, make_trader):
    trader = make_trader(make_user())
    follower = make_user()

    created = client.post("/api/v1/copy-relationships", json={
        "follower_id": str(follower.id),
        "trader_id": str(trader.id),
        "allocation_percentage": "50",
    })
    assert created.status_code == 201
    rel_id = created.json()["id"]

    paused = client.patch(f"/api/v1/copy-relationships/{rel_id}", json={"status": "paused"})
    assert paused.json()["status"] == CopyStatus.PAUSED.value

    stopped = client.patch(f"/api/v1/copy-relationships/{rel_id}", json={"status": "stopped"})
    assert stopped.status_code == 200

    conflict = client.patch(f"/api/v1/copy-relationships/{rel_id}", json={"status": "active"})
    assert conflict.status_code == 409
    assert conflict.json()["error"]["code"] == "INVALID_STATE"

    self_follow = client.post("/api/v1/copy-relationships", json={
        "follower_id": str(trader.user_id),
        "trader_id": str(trader.id),
    })
    assert self_follow.status_code == 400


def test_open_investment(client: TestClient, db_session: Session, make_user, make_plan):
    user = make_user(balance="1000")
    plan = make_plan(min_amount="100", max_amount="800")

    plans = client.get("/api/v1/investment-plans").json()
    assert [p["id"] for p in plans] == [str(plan.id)]

    response = client.post("/api/v1/investments", json={
        "user_id": str(user.id), "plan_id": str(plan.id), "amount": "500",
    })
    assert response.status_code == 201
    assert response.json()["status"] == "active"
    assert get_balance(db=db_session, user_id=user.id) == Decimal("500")

    too_big = client.post("/api/v1/investments", json={
        "user_id": str(user.id), "plan_id": str(plan.id), "amount": "900",
    })
    assert too_big.status_code == 400

    investments = client.get(f"/api/v1/users/{user.id}/investments").json()
    assert len(investments) == 1

    history = client.get(f"/api/v1/users/{user.id}/transactions").json()
    assert [t["type"] for t in history] == ["investment"]


def test_deposit_request_and_admin_review(client: TestClient, db_session: Session, make_user):
    user = make_user(balance="0")
    admin = make_user(email="admin@example.com")

    created = client.post("/api/v1/transactions", json={
        "user_id": str(user.id), "type": "deposit", "amount": "250", "method": "bank_transfer",
    })
    assert created.status_code == 201
    transaction_id = created.json()["id"]
    assert created.json()["status"] == "pending"

    queue = client.get("/admin/v1/transactions", params={"status": "pending"}).json()
    assert [t["id"] for t in queue] == [transaction_id]

    approved = client.post(f"/admin/v1/transactions/{transaction_id}/review", json={
        "action": "approve", "reviewer_id": str(admin.id),
    })
    assert approved.status_code == 200
    assert approved.json()["status"] == "completed"
    assert get_balance(db=db_session, user_id=user.id) == Decimal("250")

    again = client.post(f"/admin/v1/transactions/{transaction_id}/review", json={
        "action": "reject", "reviewer_id": str(admin.id),
    })
    assert again.status_code == 409


def test_withdrawal_review_insufficient_funds_returns_402(client: TestClient, db_session: Session, make_user, make_pending_transaction):
    user = make_user(balance="150")
    admin = make_user(email="admin@example.com")
    withdrawal = make_pending_transaction(user, TransactionType.WITHDRAWAL, "200")

    response = client.post(f"/admin/v1/transactions/{withdrawal.id}/review", json={
        "action": "approve", "reviewer_id": str(admin.id),
    })

    assert response.status_code == 402
    assert get_balance(db=db_session, user_id=user.id) == Decimal("150")
    pending = client.get("/admin/v1/transactions", params={"status": "pending"}).json()
    assert [t["id"] for t in pending] == [str(withdrawal.id)]


def test_investment_transactions_cannot_be_requested(client: TestClient, make_user):
    user = make_user(balance="1000")

    response = client.post("/api/v1/transactions", json={
        "user_id": str(user.id), "type": "investment", "amount": "10", "method": "balance",
    })

    assert response.status_code == 422


def test_admin_plan_management(client: TestClient):
    created = client.post("/admin/v1/investment-plans", json={
        "name": "Premium 90",
        "min_amount": "1000",
        "max_amount": "50000",
        "roi_percentage": "18",
        "lock_period_days": 90,
        "features": ["Priority support"],
    })
    assert created.status_code == 201
    plan_id = created.json()["id"]

    updated = client.patch(f"/admin/v1/investment-plans/{plan_id}", json={"status": "inactive"})
    assert updated.status_code == 200
    assert updated.json()["status"] == "inactive"

    assert client.get("/api/v1/investment-plans").json() == []
    assert len(client.get("/admin/v1/investment-plans").json()) == 1

    invalid = client.patch(f"/admin/v1/investment-plans/{plan_id}", json={"max_amount": "10"})
    assert invalid.status_code == 400

    missing = client.patch(f"/admin/v1/investment-plans/{uuid4()}", json={"name": "Nope"})
    assert missing.status_code == 404


def test_metrics_endpoint(client: TestClient, make_user, asset):
    user = make_user(balance="1000")
    client.post("/api/v1/trades", json={
        "user_id": str(user.id), "asset_id": str(asset.id), "type": "buy", "amount": "1",
    })

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "trades_executed_total" in response.text
    assert "http_requests_total" in response.text
