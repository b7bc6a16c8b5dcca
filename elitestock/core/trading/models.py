"""
Trading models - Trader profiles, copy relationships and trades
"""

from decimal import Decimal
from sqlalchemy import (
    Column, String, Integer, Text, ForeignKey, Numeric, DateTime,
    CheckConstraint, Index, Enum as SQLEnum, Uuid,
)
from sqlalchemy.orm import relationship
import enum
from elitestock.core.common.base_model import BaseModel
from elitestock.core.common.money import quantize_money


class TraderStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class CopyStatus(str, enum.Enum):
    """Copy relationship status - only ACTIVE relationships receive copied trades"""
    ACTIVE = "active"
    PAUSED = "paused"
    STOPPED = "stopped"  # Terminal


class TradeType(str, enum.Enum):
    BUY = "buy"
    SELL = "sell"


class TradeStatus(str, enum.Enum):
    """
    Trade lifecycle: PENDING -> EXECUTED | FAILED (both terminal)
    """
    PENDING = "pending"
    EXECUTED = "executed"
    FAILED = "failed"


class TradeFailureReason(str, enum.Enum):
    INSUFFICIENT_FUNDS = "insufficient_funds"
    REJECTED = "rejected"  # Validation failure at execution time (e.g. suspended account)
    EXPIRED = "expired"


class Trader(BaseModel):
    """Trader profile - a user that other users can follow"""

    __tablename__ = "traders"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", name="fk_traders_user_id"), nullable=False, unique=True, index=True)
    bio = Column(Text, nullable=True)
    win_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    profit_30d = Column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    followers = Column(Integer, nullable=False, default=0)
    rating = Column(Numeric(3, 1), nullable=False, default=Decimal("0"))
    status = Column(SQLEnum(TraderStatus, name="trader_status"), nullable=False, default=TraderStatus.ACTIVE)

    user = relationship("User", foreign_keys=[user_id], lazy="select")


class CopyRelationship(BaseModel):
    """Follower -> trader relationship with a proportional allocation"""

    __tablename__ = "copy_relationships"

    follower_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", name="fk_copy_relationships_follower_id"), nullable=False, index=True)
    trader_id = Column(Uuid(as_uuid=True), ForeignKey("traders.id", name="fk_copy_relationships_trader_id"), nullable=False, index=True)
    allocation_percentage = Column(Numeric(5, 2), nullable=False, default=Decimal("100"))
    status = Column(SQLEnum(CopyStatus, name="copy_status"), nullable=False, default=CopyStatus.ACTIVE, index=True)

    trader = relationship("Trader", foreign_keys=[trader_id], lazy="select")

    __table_args__ = (
        CheckConstraint(
            'allocation_percentage >= 1 AND allocation_percentage <= 100',
            name='check_copy_relationships_allocation_range',
        ),
        Index('ix_copy_relationships_trader_status', 'trader_id', 'status'),
    )


class Trade(BaseModel):
    """
    Trade model

    A trade with copied_from_trade_id set is a follower copy and is never
    fanned out again.
    """

    __tablename__ = "trades"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", name="fk_trades_user_id"), nullable=False, index=True)
    asset_id = Column(Uuid(as_uuid=True), ForeignKey("assets.id", name="fk_trades_asset_id"), nullable=False, index=True)
    type = Column(SQLEnum(TradeType, name="trade_type"), nullable=False)
    amount = Column(Numeric(24, 8), nullable=False)
    price = Column(Numeric(24, 8), nullable=False)
    status = Column(SQLEnum(TradeStatus, name="trade_status"), nullable=False, default=TradeStatus.PENDING, index=True)
    executed_at = Column(DateTime(timezone=True), nullable=True)
    copied_from_trade_id = Column(Uuid(as_uuid=True), ForeignKey("trades.id", name="fk_trades_copied_from_trade_id"), nullable=True, index=True)
    failure_reason = Column(String(50), nullable=True)
    failed_at = Column(DateTime(timezone=True), nullable=True)

    asset = relationship("Asset", foreign_keys=[asset_id], lazy="select")
    copies = relationship("Trade", foreign_keys=[copied_from_trade_id], lazy="select", order_by="Trade.created_at")

    __table_args__ = (
        CheckConstraint('amount > 0', name='check_trades_amount_positive'),
        Index('ix_trades_status_created_at', 'status', 'created_at'),
    )

    @property
    def cost(self) -> Decimal:
        """amount x price rounded to the stored precision"""
        return quantize_money(Decimal(self.amount) * Decimal(self.price))

    @property
    def is_copy(self) -> bool:
        return self.copied_from_trade_id is not None
