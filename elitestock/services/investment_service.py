"""
Investment Engine - Open fixed-term investments and manage plans
"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from elitestock.core.common.money import is_money_precision
from elitestock.core.investments.models import Investment, InvestmentPlan, InvestmentStatus, PlanStatus
from elitestock.core.transactions.models import Transaction, TransactionStatus, TransactionType
from elitestock.core.users.models import User
from elitestock.infrastructure.database import lock_row, unit_of_work
from elitestock.services.events import EventBus, EventType, publish
from elitestock.services.exceptions import InsufficientFunds, NotFound, ValidationError
from elitestock.services.ledger import BalanceDirection, adjust_balance
from elitestock.utils.metrics import record_insufficient_funds, record_investment_opened

logger = logging.getLogger(__name__)

PLAN_FIELDS = ("name", "description", "min_amount", "max_amount", "roi_percentage", "lock_period_days", "features", "status")


def _is_bounded(max_amount: Optional[Decimal]) -> bool:
    # NULL and 0 both mean "no upper bound"
    return max_amount is not None and Decimal(max_amount) != 0


def open_investment(
    *,
    db: Session,
    user_id: UUID,
    plan_id: UUID,
    amount: Decimal,
    now: Optional[datetime] = None,
    events: Optional[EventBus] = None,
) -> Investment:
    """
    Open an investment: debit the principal, create the ACTIVE investment and
    its COMPLETED `investment` transaction in one unit of work.

    The plan's roi_percentage and lock_period_days are copied onto the
    investment, so later plan edits never change its maturity or payout.

    Raises:
        NotFound: unknown user or plan
        ValidationError: inactive plan, suspended user, amount <= 0 or
            outside [min_amount, max_amount]
        InsufficientFunds: amount exceeds the user's balance
    """
    amount = Decimal(amount)
    if amount <= 0:
        raise ValidationError("Investment amount must be greater than zero")
    if not is_money_precision(amount):
        raise ValidationError("Investment amount has more than 8 decimal places")
    if now is None:
        now = datetime.now(timezone.utc)

    with unit_of_work(db):
        plan = db.get(InvestmentPlan, plan_id)
        if plan is None:
            raise NotFound(f"Investment plan {plan_id} not found")
        if plan.status != PlanStatus.ACTIVE:
            raise ValidationError(f"Investment plan {plan.name} is not active")

        user = db.get(User, user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found")
        if user.suspended:
            raise ValidationError(f"User {user_id} is suspended")

        if amount < Decimal(plan.min_amount):
            raise ValidationError(f"Minimum investment amount is {plan.min_amount}")
        if _is_bounded(plan.max_amount) and amount > Decimal(plan.max_amount):
            raise ValidationError(f"Maximum investment amount is {plan.max_amount}")

        try:
            adjust_balance(db=db, user_id=user_id, amount=amount, direction=BalanceDirection.DEBIT)
        except InsufficientFunds:
            record_insufficient_funds("investment")
            raise

        investment = Investment(
            user_id=user_id,
            plan_id=plan.id,
            amount=amount,
            roi_percentage=plan.roi_percentage,
            lock_period_days=plan.lock_period_days,
            status=InvestmentStatus.ACTIVE,
            start_date=now,
            end_date=now + timedelta(days=plan.lock_period_days),
        )
        db.add(investment)
        db.flush()  # Need investment.id for the transaction row

        db.add(Transaction(
            user_id=user_id,
            type=TransactionType.INVESTMENT,
            amount=amount,
            status=TransactionStatus.COMPLETED,
            method="balance",
            description=f"Investment in {plan.name}",
            investment_id=investment.id,
            completed_at=now,
        ))

    db.refresh(investment)
    record_investment_opened()
    logger.info(
        f"Investment {investment.id} opened: user={user_id} plan={plan.name} amount={amount} matures={investment.end_date}",
        extra={"investment_id": str(investment.id), "user_id": str(user_id)},
    )

    publish(
        events,
        EventType.INVESTMENT_OPENED,
        investment_id=str(investment.id),
        user_id=str(user_id),
        email=user.email,
        plan_name=plan.name,
        amount=str(amount),
        roi_percentage=str(investment.roi_percentage),
        end_date=investment.end_date.isoformat(),
    )
    return investment


def _validate_plan_terms(values: Dict[str, Any]) -> None:
    min_amount = values.get("min_amount")
    max_amount = values.get("max_amount")
    if min_amount is not None and Decimal(min_amount) < 0:
        raise ValidationError("min_amount must not be negative")
    if max_amount is not None and Decimal(max_amount) < 0:
        raise ValidationError("max_amount must not be negative")
    if min_amount is not None and _is_bounded(max_amount) and Decimal(max_amount) < Decimal(min_amount):
        raise ValidationError("max_amount must be greater than or equal to min_amount")
    roi = values.get("roi_percentage")
    if roi is not None and Decimal(roi) < 0:
        raise ValidationError("roi_percentage must not be negative")
    lock_period = values.get("lock_period_days")
    if lock_period is not None and int(lock_period) <= 0:
        raise ValidationError("lock_period_days must be greater than zero")


def create_plan(*, db: Session, **values: Any) -> InvestmentPlan:
    unknown = set(values) - set(PLAN_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown plan fields: {', '.join(sorted(unknown))}")
    for required in ("name", "min_amount", "roi_percentage", "lock_period_days"):
        if values.get(required) is None:
            raise ValidationError(f"{required} is required")
    _validate_plan_terms(values)

    plan = InvestmentPlan(**values)
    db.add(plan)
    db.commit()
    db.refresh(plan)

    logger.info(f"Investment plan {plan.id} created: {plan.name}")
    return plan


def update_plan(*, db: Session, plan_id: UUID, **changes: Any) -> InvestmentPlan:
    """
    Edit a plan. Investments already opened keep their snapshotted terms.
    """
    unknown = set(changes) - set(PLAN_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown plan fields: {', '.join(sorted(unknown))}")

    with unit_of_work(db):
        plan = lock_row(db, InvestmentPlan, plan_id)
        if plan is None:
            raise NotFound(f"Investment plan {plan_id} not found")

        merged = {name: getattr(plan, name) for name in PLAN_FIELDS}
        merged.update(changes)
        _validate_plan_terms(merged)

        for name, value in changes.items():
            setattr(plan, name, value)

    db.refresh(plan)
    logger.info(f"Investment plan {plan_id} updated: {', '.join(sorted(changes)) or 'no changes'}")
    return plan


def list_plans(*, db: Session, include_inactive: bool = False) -> List[InvestmentPlan]:
    stmt = select(InvestmentPlan).order_by(InvestmentPlan.min_amount.asc())
    if not include_inactive:
        stmt = stmt.where(InvestmentPlan.status == PlanStatus.ACTIVE)
    return list(db.execute(stmt).scalars().all())


def list_user_investments(*, db: Session, user_id: UUID) -> List[Investment]:
    return list(db.execute(
        select(Investment)
        .where(Investment.user_id == user_id)
        .order_by(Investment.created_at.desc())
    ).scalars().all())
