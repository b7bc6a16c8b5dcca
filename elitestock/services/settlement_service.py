"""
Settlement service - Mature fixed-term investments

The sweep is idempotent and safe to run concurrently: each investment is
settled in its own transaction under FOR UPDATE SKIP LOCKED with a
status = ACTIVE re-check, and (investment_id, type) is unique on the
transactions table, so an investment is credited at most once.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.orm import Session

from elitestock.core.common.money import quantize_money
from elitestock.core.investments.models import Investment, InvestmentStatus
from elitestock.core.transactions.models import Transaction, TransactionStatus, TransactionType
from elitestock.core.users.models import User
from elitestock.infrastructure.database import lock_row, unit_of_work
from elitestock.services.events import EventBus, EventType, publish
from elitestock.services.ledger import BalanceDirection, adjust_balance
from elitestock.utils.metrics import record_settlement

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    processed_count: int = 0
    skipped_count: int = 0
    errors: List[str] = field(default_factory=list)
    total_credited: Decimal = Decimal("0")
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def errors_count(self) -> int:
        return len(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed_count": self.processed_count,
            "skipped_count": self.skipped_count,
            "errors_count": self.errors_count,
            "errors": list(self.errors),
            "total_credited": str(self.total_credited),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


def calculate_return(principal: Decimal, roi_percentage: Decimal) -> tuple:
    """
    Return (profit, total_return) for a principal at a flat ROI percentage.

    profit is rounded to 8 decimal places before it is added, so
    principal + profit == total_return holds for the stored values.
    """
    principal = quantize_money(principal)
    profit = quantize_money(principal * Decimal(roi_percentage) / Decimal("100"))
    return profit, principal + profit


def _settle_one(db: Session, investment_id, now: datetime) -> Optional[Dict[str, Any]]:
    """
    Settle a single investment in its own unit of work.

    Returns None when the investment is locked by another sweep or is no
    longer ACTIVE.
    """
    with unit_of_work(db):
        investment = lock_row(
            db,
            Investment,
            investment_id,
            Investment.status == InvestmentStatus.ACTIVE,
            skip_locked=True,
        )
        if investment is None:
            return None

        profit, total_return = calculate_return(investment.amount, investment.roi_percentage)

        investment.status = InvestmentStatus.COMPLETED
        investment.completed_at = now
        investment.profit = profit
        investment.total_return = total_return

        adjust_balance(
            db=db,
            user_id=investment.user_id,
            amount=total_return,
            direction=BalanceDirection.CREDIT,
        )

        db.add(Transaction(
            user_id=investment.user_id,
            type=TransactionType.INVESTMENT_RETURN,
            amount=total_return,
            status=TransactionStatus.COMPLETED,
            method="balance",
            description=f"Return on investment {investment.id}",
            investment_id=investment.id,
            completed_at=now,
        ))

        user_id = investment.user_id
        principal = Decimal(investment.amount)

    user = db.get(User, user_id)
    return {
        "investment_id": str(investment_id),
        "user_id": str(user_id),
        "email": user.email if user is not None else None,
        "principal": str(principal),
        "profit": str(profit),
        "total_return": total_return,
    }


def _record_error(result: SweepResult, investment_id, e: Exception) -> None:
    error_msg = f"Error settling investment {investment_id}: {type(e).__name__}: {str(e)}"
    logger.error(error_msg, exc_info=True, extra={"investment_id": str(investment_id)})
    result.errors.append(error_msg)


def run_settlement_sweep(
    *,
    session_factory: Callable[[], Session],
    now: Optional[datetime] = None,
    max_items: int = 1000,
    events: Optional[EventBus] = None,
) -> SweepResult:
    """
    Settle every ACTIVE investment whose end_date <= now, oldest first.

    For each investment: profit = principal x roi / 100 on the snapshotted
    terms, mark COMPLETED, credit principal + profit, write a COMPLETED
    investment_return transaction.

    Fail-soft: an error on one investment is rolled back, logged and
    appended to `errors`; it is not counted as processed and the sweep
    continues with the next investment. Losing the database connection
    is fatal and propagates to the caller.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    result = SweepResult(started_at=datetime.now(timezone.utc))
    started = time.monotonic()

    db = session_factory()
    try:
        due_ids = db.execute(
            select(Investment.id)
            .where(
                Investment.status == InvestmentStatus.ACTIVE,
                Investment.end_date <= now,
            )
            .order_by(Investment.end_date.asc(), Investment.created_at.asc())
            .limit(max_items)
        ).scalars().all()
        db.rollback()  # End the read transaction before per-item locking

        for investment_id in due_ids:
            try:
                settled = _settle_one(db, investment_id, now)
            except (OperationalError, InterfaceError):
                raise
            except DBAPIError as e:
                if e.connection_invalidated:
                    raise
                _record_error(result, investment_id, e)
                continue
            except Exception as e:
                _record_error(result, investment_id, e)
                continue

            if settled is None:
                result.skipped_count += 1
                continue

            result.processed_count += 1
            result.total_credited += settled["total_return"]

            settled["total_return"] = str(settled["total_return"])
            publish(events, EventType.INVESTMENT_MATURED, **settled)
    finally:
        db.close()

    result.finished_at = datetime.now(timezone.utc)
    record_settlement(result.processed_count, result.errors_count, time.monotonic() - started)

    logger.info(
        f"Settlement sweep: {len(due_ids)} due, {result.processed_count} settled, "
        f"{result.skipped_count} skipped, {result.errors_count} errors, credited {result.total_credited}",
        extra={"sweep": result.to_dict()},
    )
    return result
