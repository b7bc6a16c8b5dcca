"""
Trades API endpoints
"""

import logging
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from elitestock.infrastructure.database import get_db
from elitestock.core.trading.models import Trade, TradeStatus
from elitestock.core.users.models import User
from elitestock.schemas.trades import CreateTradeRequest, TradeExecutionResponse, TradeResponse
from elitestock.services.exceptions import NotFound
from elitestock.services.trade_engine import TradeExecutionResult, create_trade, execute_with_copies

logger = logging.getLogger(__name__)

router = APIRouter()


def _execution_response(result: TradeExecutionResult) -> TradeExecutionResponse:
    return TradeExecutionResponse(
        trade=TradeResponse.model_validate(result.trade),
        executed=result.executed,
        copies_created=result.copies_created,
        executed_copy_ids=result.executed_copy_ids,
        failed_copy_ids=result.failed_copy_ids,
    )


@router.post(
    "/trades",
    response_model=TradeExecutionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place a trade",
    description="Create a trade and execute it immediately. Followers of the trader receive proportional copies.",
)
def place_trade(
    request: CreateTradeRequest,
    db: Session = Depends(get_db),
) -> TradeExecutionResponse:
    """
    Create + execute. If the user cannot afford a BUY the trade is left
    PENDING and 402 is returned; it expires after TRADE_PENDING_TTL_HOURS.
    """
    trade = create_trade(
        db=db,
        user_id=request.user_id,
        asset_id=request.asset_id,
        trade_type=request.type,
        amount=request.amount,
        price=request.price,
    )
    result = execute_with_copies(db=db, trade_id=trade.id)
    return _execution_response(result)


@router.post(
    "/trades/{trade_id}/execute",
    response_model=TradeExecutionResponse,
    summary="Execute a pending trade",
    description="Idempotent: a trade that already left PENDING is returned unchanged with executed=false.",
)
def execute_pending_trade(
    trade_id: UUID,
    db: Session = Depends(get_db),
) -> TradeExecutionResponse:
    result = execute_with_copies(db=db, trade_id=trade_id)
    return _execution_response(result)


@router.get(
    "/users/{user_id}/trades",
    response_model=List[TradeResponse],
    summary="List a user's trades",
)
def list_user_trades(
    user_id: UUID,
    trade_status: Optional[TradeStatus] = Query(default=None, alias="status", description="Filter by status"),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
) -> List[TradeResponse]:
    if db.get(User, user_id) is None:
        raise NotFound(f"User {user_id} not found")

    stmt = select(Trade).where(Trade.user_id == user_id)
    if trade_status is not None:
        stmt = stmt.where(Trade.status == trade_status)
    trades = db.execute(stmt.order_by(Trade.created_at.desc()).limit(limit)).scalars().all()
    return [TradeResponse.model_validate(t) for t in trades]
