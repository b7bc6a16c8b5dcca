"""
Tests for opening investments and managing plans
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4
from sqlalchemy import select
from sqlalchemy.orm import Session

from elitestock.core.investments.models import InvestmentStatus, PlanStatus
from elitestock.core.transactions.models import Transaction, TransactionStatus, TransactionType
from elitestock.services.events import EventType
from elitestock.services.exceptions import InsufficientFunds, NotFound, ValidationError
from elitestock.services.investment_service import (
    create_plan,
    list_plans,
    list_user_investments,
    open_investment,
    update_plan,
)
from elitestock.services.ledger import get_balance

OPENED_AT = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)


def test_open_investment_debits_and_snapshots_terms(db_session: Session, make_user, make_plan, events):
    user = make_user(balance="1000")
    plan = make_plan(min_amount="100", roi_percentage="12.5", lock_period_days=30)

    investment = open_investment(
        db=db_session, user_id=user.id, plan_id=plan.id, amount=Decimal("500"), now=OPENED_AT, events=events,
    )

    assert investment.status == InvestmentStatus.ACTIVE
    assert investment.amount == Decimal("500")
    assert investment.roi_percentage == Decimal("12.5")
    assert investment.lock_period_days == 30
    assert investment.end_date - investment.start_date == timedelta(days=30)
    assert investment.profit is None
    assert get_balance(db=db_session, user_id=user.id) == Decimal("500")

    rows = db_session.execute(
        select(Transaction).where(Transaction.investment_id == investment.id)
    ).scalars().all()
    assert len(rows) == 1
    assert rows[0].type == TransactionType.INVESTMENT
    assert rows[0].status == TransactionStatus.COMPLETED
    assert rows[0].amount == Decimal("500")

    opened = events.of_type(EventType.INVESTMENT_OPENED)
    assert len(opened) == 1
    assert opened[0].payload["investment_id"] == str(investment.id)


def test_amount_limits(db_session: Session, make_user, make_plan):
    user = make_user(balance="10000")
    plan = make_plan(min_amount="100", max_amount="1000")

    with pytest.raises(ValidationError):
        open_investment(db=db_session, user_id=user.id, plan_id=plan.id, amount=Decimal("99.99"))
    with pytest.raises(ValidationError):
        open_investment(db=db_session, user_id=user.id, plan_id=plan.id, amount=Decimal("1000.01"))
    with pytest.raises(ValidationError):
        open_investment(db=db_session, user_id=user.id, plan_id=plan.id, amount=Decimal("0"))

    open_investment(db=db_session, user_id=user.id, plan_id=plan.id, amount=Decimal("100"))
    open_investment(db=db_session, user_id=user.id, plan_id=plan.id, amount=Decimal("1000"))
    assert get_balance(db=db_session, user_id=user.id) == Decimal("8900")


@pytest.mark.parametrize("max_amount", [None, "0"])
def test_unbounded_plan(db_session: Session, make_user, make_plan, max_amount):
    user = make_user(balance="1000000")
    plan = make_plan(min_amount="100", max_amount=max_amount)

    investment = open_investment(db=db_session, user_id=user.id, plan_id=plan.id, amount=Decimal("750000"))

    assert investment.amount == Decimal("750000")


def test_insufficient_funds_writes_nothing(db_session: Session, make_user, make_plan):
    user = make_user(balance="150")
    plan = make_plan(min_amount="100")

    with pytest.raises(InsufficientFunds):
        open_investment(db=db_session, user_id=user.id, plan_id=plan.id, amount=Decimal("200"))

    assert get_balance(db=db_session, user_id=user.id) == Decimal("150")
    assert list_user_investments(db=db_session, user_id=user.id) == []
    assert db_session.execute(select(Transaction)).scalars().all() == []


def test_inactive_plan_and_suspended_user_rejected(db_session: Session, make_user, make_plan):
    user = make_user(balance="1000")
    inactive = make_plan(status=PlanStatus.INACTIVE)
    active = make_plan()
    suspended = make_user(balance="1000", suspended=True)

    with pytest.raises(ValidationError):
        open_investment(db=db_session, user_id=user.id, plan_id=inactive.id, amount=Decimal("200"))
    with pytest.raises(ValidationError):
        open_investment(db=db_session, user_id=suspended.id, plan_id=active.id, amount=Decimal("200"))
    with pytest.raises(NotFound):
        open_investment(db=db_session, user_id=user.id, plan_id=uuid4(), amount=Decimal("200"))
    with pytest.raises(NotFound):
        open_investment(db=db_session, user_id=uuid4(), plan_id=active.id, amount=Decimal("200"))

    assert get_balance(db=db_session, user_id=user.id) == Decimal("1000")
    assert get_balance(db=db_session, user_id=suspended.id) == Decimal("1000")


def test_plan_edit_does_not_change_open_investment(db_session: Session, make_user, make_plan):
    user = make_user(balance="1000")
    plan = make_plan(roi_percentage="10", lock_period_days=30)
    investment = open_investment(db=db_session, user_id=user.id, plan_id=plan.id, amount=Decimal("500"), now=OPENED_AT)

    update_plan(db=db_session, plan_id=plan.id, roi_percentage=Decimal("25"), lock_period_days=90)

    db_session.refresh(investment)
    assert investment.roi_percentage == Decimal("10")
    assert investment.lock_period_days == 30


def test_create_and_update_plan(db_session: Session):
    plan = create_plan(
        db=db_session,
        name="Starter",
        min_amount=Decimal("50"),
        max_amount=Decimal("5000"),
        roi_percentage=Decimal("5"),
        lock_period_days=7,
        features=["Weekly payout"],
    )
    assert plan.status == PlanStatus.ACTIVE

    updated = update_plan(db=db_session, plan_id=plan.id, status=PlanStatus.INACTIVE)
    assert updated.status == PlanStatus.INACTIVE
    assert list_plans(db=db_session) == []
    assert [p.id for p in list_plans(db=db_session, include_inactive=True)] == [plan.id]


def test_plan_validation(db_session: Session, make_plan):
    with pytest.raises(ValidationError):
        create_plan(db=db_session, name="No lock", min_amount=Decimal("10"), roi_percentage=Decimal("5"))
    with pytest.raises(ValidationError):
        create_plan(db=db_session, name="Zero lock", min_amount=Decimal("10"), roi_percentage=Decimal("5"), lock_period_days=0)
    with pytest.raises(ValidationError):
        create_plan(db=db_session, name="Bad", min_amount=Decimal("10"), roi_percentage=Decimal("5"), lock_period_days=7, colour="red")

    plan = make_plan(min_amount="100", max_amount="1000")
    with pytest.raises(ValidationError):
        update_plan(db=db_session, plan_id=plan.id, max_amount=Decimal("50"))
    with pytest.raises(NotFound):
        update_plan(db=db_session, plan_id=uuid4(), name="Missing")

    db_session.refresh(plan)
    assert plan.max_amount == Decimal("1000")


def test_sub_precision_principal_rejected(db_session: Session, make_user, make_plan):
    user = make_user(balance="1000")
    plan = make_plan(min_amount="0")

    with pytest.raises(ValidationError):
        open_investment(db=db_session, user_id=user.id, plan_id=plan.id, amount=Decimal("100.000000005"), now=OPENED_AT)

    assert get_balance(db=db_session, user_id=user.id) == Decimal("1000")
    assert list_user_investments(db=db_session, user_id=user.id) == []
