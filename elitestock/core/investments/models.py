"""
Investment models - Fixed-term, fixed-return plans and the investments opened in them
"""

from sqlalchemy import (
    Column, String, Integer, Text, ForeignKey, Numeric, DateTime, JSON,
    CheckConstraint, Index, Enum as SQLEnum, Uuid,
)
from sqlalchemy.orm import relationship
import enum
from elitestock.core.common.base_model import BaseModel


class PlanStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class InvestmentStatus(str, enum.Enum):
    """Investment lifecycle: ACTIVE -> COMPLETED (terminal, rows are never deleted)"""
    ACTIVE = "active"
    COMPLETED = "completed"


class InvestmentPlan(BaseModel):
    """
    Investment plan

    max_amount NULL (or 0) means the plan has no upper bound.
    Editing a plan never changes investments already opened in it: their
    terms are snapshotted onto the Investment row.
    """

    __tablename__ = "investment_plans"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    min_amount = Column(Numeric(24, 8), nullable=False)
    max_amount = Column(Numeric(24, 8), nullable=True)
    roi_percentage = Column(Numeric(7, 2), nullable=False)
    lock_period_days = Column(Integer, nullable=False)
    features = Column(JSON, nullable=True)
    status = Column(SQLEnum(PlanStatus, name="plan_status"), nullable=False, default=PlanStatus.ACTIVE, index=True)

    __table_args__ = (
        CheckConstraint('min_amount >= 0', name='check_investment_plans_min_amount'),
        CheckConstraint('lock_period_days > 0', name='check_investment_plans_lock_period'),
    )


class Investment(BaseModel):
    """
    Investment model

    Principal is debited from the user's balance when the investment is
    opened. The settlement sweep credits principal + profit once end_date
    has passed and moves the row to COMPLETED.
    """

    __tablename__ = "investments"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", name="fk_investments_user_id"), nullable=False, index=True)
    plan_id = Column(Uuid(as_uuid=True), ForeignKey("investment_plans.id", name="fk_investments_plan_id"), nullable=False, index=True)
    amount = Column(Numeric(24, 8), nullable=False)  # Principal

    # Terms snapshotted from the plan at open time
    roi_percentage = Column(Numeric(7, 2), nullable=False)
    lock_period_days = Column(Integer, nullable=False)

    status = Column(SQLEnum(InvestmentStatus, name="investment_status"), nullable=False, default=InvestmentStatus.ACTIVE, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)

    profit = Column(Numeric(24, 8), nullable=True)
    total_return = Column(Numeric(24, 8), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    plan = relationship("InvestmentPlan", foreign_keys=[plan_id], lazy="select")

    __table_args__ = (
        CheckConstraint('amount > 0', name='check_investments_amount_positive'),
        # Sweep lookup: status = ACTIVE AND end_date <= now
        Index('ix_investments_status_end_date', 'status', 'end_date'),
    )
