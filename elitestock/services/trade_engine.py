"""
Trade Engine - Execute trades against the Balance Ledger and fan out copies

Lock order inside every unit of work: trade row first, then user row
(taken by adjust_balance).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from elitestock.core.common.money import is_money_precision, quantize_money
from elitestock.core.markets.models import Asset
from elitestock.core.trading.models import (
    CopyRelationship,
    CopyStatus,
    Trade,
    TradeFailureReason,
    TradeStatus,
    TradeType,
    Trader,
)
from elitestock.core.users.models import User
from elitestock.infrastructure.database import lock_row, unit_of_work
from elitestock.services.events import EventBus, EventType, publish
from elitestock.services.exceptions import CoreError, InsufficientFunds, NotFound, ValidationError
from elitestock.services.ledger import BalanceDirection, adjust_balance
from elitestock.utils.metrics import (
    record_copy_trades_created,
    record_insufficient_funds,
    record_trade_executed,
    record_trade_failed,
)

logger = logging.getLogger(__name__)


@dataclass
class TradeExecutionResult:
    """Outcome of executing an original trade and dispatching its copies"""
    trade: Trade
    executed: bool
    copies_created: int = 0
    executed_copy_ids: List[UUID] = field(default_factory=list)
    failed_copy_ids: List[UUID] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def create_trade(
    *,
    db: Session,
    user_id: UUID,
    asset_id: UUID,
    trade_type: TradeType,
    amount: Decimal,
    price: Optional[Decimal] = None,
) -> Trade:
    """
    Create a PENDING trade. Price defaults to the asset's current price.
    No ledger effect until the trade is executed.
    """
    amount = Decimal(amount)
    if amount <= 0:
        raise ValidationError("Trade amount must be greater than zero")
    if not is_money_precision(amount):
        raise ValidationError("Trade amount has more than 8 decimal places")

    user = db.get(User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")

    asset = db.get(Asset, asset_id)
    if asset is None:
        raise NotFound(f"Asset {asset_id} not found")
    if not asset.is_active:
        raise ValidationError(f"Asset {asset.symbol} is not tradable")

    if price is None:
        price = asset.price
    price = Decimal(price)
    if price <= 0:
        raise ValidationError("Trade price must be greater than zero")
    if not is_money_precision(price):
        raise ValidationError("Trade price has more than 8 decimal places")

    trade = Trade(
        user_id=user_id,
        asset_id=asset_id,
        type=TradeType(trade_type),
        amount=amount,
        price=price,
        status=TradeStatus.PENDING,
    )
    db.add(trade)
    db.commit()
    db.refresh(trade)

    logger.info(f"Trade {trade.id} created: {trade.type.value} {amount} {asset.symbol} @ {price} for user {user_id}")
    return trade


def execute_trade(
    *,
    db: Session,
    trade_id: UUID,
    events: Optional[EventBus] = None,
) -> Optional[Trade]:
    """
    Execute a PENDING trade in one unit of work.

    - BUY debits amount x price (rounded to 8 places) from the trade owner's
      balance, SELL credits it
    - Original (non-copy) trades fan out one PENDING copy per ACTIVE copy
      relationship of the owner's trader profile, sized by allocation
    - Copies (copied_from_trade_id set) never fan out again

    Returns None when the trade is no longer PENDING (already executed or
    failed): re-running is a no-op.

    Raises:
        NotFound: trade, asset or user missing
        ValidationError: suspended account, or cost that rounds to zero at
            8 decimal places
        InsufficientFunds: BUY cost exceeds balance; trade stays PENDING,
            balance unchanged, no copies created
    """
    with unit_of_work(db):
        trade = lock_row(db, Trade, trade_id)
        if trade is None:
            raise NotFound(f"Trade {trade_id} not found")

        if trade.status != TradeStatus.PENDING:
            logger.info(f"Trade {trade_id} is {trade.status.value}, skipping execution")
            return None

        asset = db.get(Asset, trade.asset_id)
        if asset is None:
            raise NotFound(f"Asset {trade.asset_id} not found")

        user = db.get(User, trade.user_id)
        if user is None:
            raise NotFound(f"User {trade.user_id} not found")
        if user.suspended:
            raise ValidationError(f"User {user.id} is suspended")

        cost = trade.cost
        if cost <= 0:
            raise ValidationError(f"Trade {trade_id} cost rounds to {cost}, below the smallest storable amount")

        direction = BalanceDirection.DEBIT if trade.type == TradeType.BUY else BalanceDirection.CREDIT
        try:
            adjust_balance(db=db, user_id=trade.user_id, amount=cost, direction=direction)
        except InsufficientFunds:
            record_insufficient_funds("trade")
            raise

        trade.status = TradeStatus.EXECUTED
        trade.executed_at = datetime.now(timezone.utc)

        copies_created = 0
        if not trade.is_copy:
            copies_created = _fan_out(db, trade)

    record_trade_executed(trade.type.value, trade.is_copy)
    record_copy_trades_created(copies_created)
    logger.info(
        f"Trade {trade.id} executed: {trade.type.value} cost={cost} user={trade.user_id} copies={copies_created}",
        extra={"trade_id": str(trade.id), "user_id": str(trade.user_id)},
    )

    publish(
        events,
        EventType.TRADE_EXECUTED,
        trade_id=str(trade.id),
        user_id=str(trade.user_id),
        email=user.email,
        asset_symbol=asset.symbol,
        trade_type=trade.type.value,
        amount=str(trade.amount),
        price=str(trade.price),
        cost=str(cost),
        copied_from_trade_id=str(trade.copied_from_trade_id) if trade.copied_from_trade_id else None,
    )
    return trade


def _fan_out(db: Session, trade: Trade) -> int:
    """Create PENDING follower copies of an original trade. Runs inside the caller's unit of work."""
    trader = db.execute(
        select(Trader).where(Trader.user_id == trade.user_id)
    ).scalar_one_or_none()
    if trader is None:
        return 0

    relationships = db.execute(
        select(CopyRelationship)
        .where(
            CopyRelationship.trader_id == trader.id,
            CopyRelationship.status == CopyStatus.ACTIVE,
        )
        .order_by(CopyRelationship.created_at.asc())
    ).scalars().all()

    created = 0
    for rel in relationships:
        if rel.follower_id == trade.user_id:
            continue
        copy_amount = quantize_money(
            Decimal(trade.amount) * Decimal(rel.allocation_percentage) / Decimal("100")
        )
        if copy_amount <= 0:
            continue
        db.add(Trade(
            user_id=rel.follower_id,
            asset_id=trade.asset_id,
            type=trade.type,
            amount=copy_amount,
            price=trade.price,
            status=TradeStatus.PENDING,
            copied_from_trade_id=trade.id,
        ))
        created += 1

    if created:
        db.flush()
    return created


def fail_trade(
    *,
    db: Session,
    trade_id: UUID,
    reason: TradeFailureReason,
    now: Optional[datetime] = None,
) -> Optional[Trade]:
    """
    Move a PENDING trade to FAILED. Returns None if the trade already left PENDING.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    with unit_of_work(db):
        trade = lock_row(db, Trade, trade_id)
        if trade is None:
            raise NotFound(f"Trade {trade_id} not found")
        if trade.status != TradeStatus.PENDING:
            return None

        trade.status = TradeStatus.FAILED
        trade.failure_reason = TradeFailureReason(reason).value
        trade.failed_at = now

    record_trade_failed(trade.failure_reason)
    logger.info(f"Trade {trade_id} failed: {trade.failure_reason}")
    return trade


def _dispatch_copy(
    db: Session,
    copy_id: UUID,
    events: Optional[EventBus],
    result: Dict[str, Any],
) -> None:
    """Execute one follower copy; failures are isolated to this copy."""
    try:
        executed = execute_trade(db=db, trade_id=copy_id, events=events)
        if executed is not None:
            result["executed_copy_ids"].append(copy_id)
    except InsufficientFunds as e:
        logger.warning(f"Copy trade {copy_id} failed: {e.message}")
        fail_trade(db=db, trade_id=copy_id, reason=TradeFailureReason.INSUFFICIENT_FUNDS)
        result["failed_copy_ids"].append(copy_id)
    except ValidationError as e:
        logger.warning(f"Copy trade {copy_id} rejected: {e.message}")
        fail_trade(db=db, trade_id=copy_id, reason=TradeFailureReason.REJECTED)
        result["failed_copy_ids"].append(copy_id)
    except (CoreError, SQLAlchemyError) as e:
        # Left PENDING for dispatch_pending_copy_trades to retry
        db.rollback()
        error_msg = f"Error dispatching copy trade {copy_id}: {str(e)}"
        logger.error(error_msg, exc_info=True)
        result["errors"].append(error_msg)


def execute_with_copies(
    *,
    db: Session,
    trade_id: UUID,
    events: Optional[EventBus] = None,
) -> TradeExecutionResult:
    """
    Execute an original trade, then dispatch each follower copy in its own
    unit of work.

    A follower that cannot afford its copy (or is suspended) gets that copy
    marked FAILED; the original and the other followers are unaffected.
    Errors on the original trade propagate unchanged.
    """
    trade = execute_trade(db=db, trade_id=trade_id, events=events)
    executed = trade is not None
    if trade is None:
        trade = db.get(Trade, trade_id)

    copy_ids = db.execute(
        select(Trade.id)
        .where(
            Trade.copied_from_trade_id == trade_id,
            Trade.status == TradeStatus.PENDING,
        )
        .order_by(Trade.created_at.asc())
    ).scalars().all()

    dispatch = {"executed_copy_ids": [], "failed_copy_ids": [], "errors": []}
    for copy_id in copy_ids:
        _dispatch_copy(db, copy_id, events, dispatch)

    db.refresh(trade)
    return TradeExecutionResult(
        trade=trade,
        executed=executed,
        copies_created=len(copy_ids) if executed else 0,
        executed_copy_ids=dispatch["executed_copy_ids"],
        failed_copy_ids=dispatch["failed_copy_ids"],
        errors=dispatch["errors"],
    )


def dispatch_pending_copy_trades(
    *,
    db: Session,
    limit: int = 500,
    events: Optional[EventBus] = None,
) -> Dict[str, Any]:
    """
    Re-dispatch follower copies still PENDING after their original executed
    (e.g. the process died between the original's commit and dispatch).

    Returns:
        Dict with summary statistics:
        - found: Number of pending copies picked up
        - executed_count / failed_count: Copies executed / marked FAILED
        - errors: List of error messages (copies left PENDING)
    """
    parent = aliased(Trade)
    copy_ids = db.execute(
        select(Trade.id)
        .join(parent, parent.id == Trade.copied_from_trade_id)
        .where(
            Trade.status == TradeStatus.PENDING,
            parent.status == TradeStatus.EXECUTED,
        )
        .order_by(Trade.created_at.asc())
        .limit(limit)
    ).scalars().all()

    dispatch = {"executed_copy_ids": [], "failed_copy_ids": [], "errors": []}
    for copy_id in copy_ids:
        _dispatch_copy(db, copy_id, events, dispatch)

    stats = {
        "found": len(copy_ids),
        "executed_count": len(dispatch["executed_copy_ids"]),
        "failed_count": len(dispatch["failed_copy_ids"]),
        "errors": dispatch["errors"],
    }
    if copy_ids:
        logger.info(f"Pending copy dispatch: {stats['found']} found, {stats['executed_count']} executed, {stats['failed_count']} failed")
    return stats


def expire_stale_trades(
    *,
    db: Session,
    older_than: timedelta,
    now: Optional[datetime] = None,
) -> int:
    """
    Fail PENDING trades created before now - older_than with reason EXPIRED.

    Returns the number of trades expired.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    cutoff = now - older_than

    stale_ids = db.execute(
        select(Trade.id)
        .where(Trade.status == TradeStatus.PENDING, Trade.created_at < cutoff)
        .order_by(Trade.created_at.asc())
    ).scalars().all()

    expired = 0
    for trade_id in stale_ids:
        if fail_trade(db=db, trade_id=trade_id, reason=TradeFailureReason.EXPIRED, now=now) is not None:
            expired += 1

    if expired:
        logger.info(f"Expired {expired} pending trades created before {cutoff.isoformat()}")
    return expired
