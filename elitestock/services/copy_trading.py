"""
Copy relationships - Follow, pause, resume and stop copying a trader
"""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from elitestock.core.trading.models import CopyRelationship, CopyStatus, Trader
from elitestock.core.users.models import User
from elitestock.infrastructure.database import lock_row, unit_of_work
from elitestock.services.exceptions import InvalidState, NotFound, ValidationError

logger = logging.getLogger(__name__)

MIN_ALLOCATION = Decimal("1")
MAX_ALLOCATION = Decimal("100")


def follow_trader(
    *,
    db: Session,
    follower_id: UUID,
    trader_id: UUID,
    allocation_percentage: Decimal = MAX_ALLOCATION,
) -> CopyRelationship:
    """
    Start copying a trader with the given allocation (1..100 percent).

    A follower may hold only one ACTIVE or PAUSED relationship per trader;
    a STOPPED one can be replaced by following again.
    """
    allocation = Decimal(allocation_percentage)
    if allocation < MIN_ALLOCATION or allocation > MAX_ALLOCATION:
        raise ValidationError("Allocation percentage must be between 1 and 100")

    with unit_of_work(db):
        trader = lock_row(db, Trader, trader_id)
        if trader is None:
            raise NotFound(f"Trader {trader_id} not found")

        follower = db.get(User, follower_id)
        if follower is None:
            raise NotFound(f"User {follower_id} not found")
        if trader.user_id == follower_id:
            raise ValidationError("Cannot copy your own trades")

        existing = db.execute(
            select(CopyRelationship).where(
                CopyRelationship.follower_id == follower_id,
                CopyRelationship.trader_id == trader_id,
                CopyRelationship.status != CopyStatus.STOPPED,
            )
        ).scalar_one_or_none()
        if existing is not None:
            raise ValidationError(f"Already copying trader {trader_id}")

        relationship = CopyRelationship(
            follower_id=follower_id,
            trader_id=trader_id,
            allocation_percentage=allocation,
            status=CopyStatus.ACTIVE,
        )
        db.add(relationship)
        trader.followers = (trader.followers or 0) + 1

    db.refresh(relationship)
    logger.info(f"User {follower_id} now copying trader {trader_id} at {allocation}%")
    return relationship


def set_copy_status(
    *,
    db: Session,
    relationship_id: UUID,
    status: CopyStatus,
) -> CopyRelationship:
    """
    Pause, resume or stop a copy relationship. STOPPED is terminal.

    Only ACTIVE relationships receive new copies; trades already copied are
    not affected by a status change.
    """
    status = CopyStatus(status)

    with unit_of_work(db):
        relationship = lock_row(db, CopyRelationship, relationship_id)
        if relationship is None:
            raise NotFound(f"Copy relationship {relationship_id} not found")
        if relationship.status == CopyStatus.STOPPED:
            raise InvalidState(f"Copy relationship {relationship_id} is stopped")

        previous = relationship.status
        if previous != status:
            relationship.status = status
            if status == CopyStatus.STOPPED:
                trader = lock_row(db, Trader, relationship.trader_id)
                if trader is not None and trader.followers:
                    trader.followers -= 1

    db.refresh(relationship)
    logger.info(f"Copy relationship {relationship_id}: {previous.value} -> {relationship.status.value}")
    return relationship
