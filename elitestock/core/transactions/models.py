"""
Transaction model - Flat log of every balance-affecting event
"""

from sqlalchemy import (
    Column, String, Text, ForeignKey, Numeric, DateTime, JSON,
    CheckConstraint, UniqueConstraint, Index, Enum as SQLEnum, Uuid,
)
from sqlalchemy.orm import relationship
import enum
from elitestock.core.common.base_model import BaseModel


class TransactionType(str, enum.Enum):
    """Transaction type enum"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    INVESTMENT = "investment"
    INVESTMENT_RETURN = "investment_return"


class TransactionStatus(str, enum.Enum):
    """
    Transaction status enum

    PENDING -> COMPLETED | FAILED. Terminal statuses are immutable.
    """
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_TRANSACTION_STATUSES = frozenset((TransactionStatus.COMPLETED, TransactionStatus.FAILED))

# Only these types go through admin review; investment rows are written completed.
REVIEWABLE_TRANSACTION_TYPES = frozenset((TransactionType.DEPOSIT, TransactionType.WITHDRAWAL))


class Transaction(BaseModel):
    """
    Transaction model

    Every ledger-affecting event produces exactly one Transaction row:
    - DEPOSIT / WITHDRAWAL: created PENDING by the user, resolved by admin review
    - INVESTMENT: written COMPLETED when an investment is opened
    - INVESTMENT_RETURN: written COMPLETED when the settlement sweep matures it

    (investment_id, type) is unique, which makes the INVESTMENT and
    INVESTMENT_RETURN rows the idempotency anchor of an investment's lifecycle.
    """

    __tablename__ = "transactions"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", name="fk_transactions_user_id"), nullable=False, index=True)
    type = Column(SQLEnum(TransactionType, name="transaction_type", create_constraint=True), nullable=False, index=True)
    amount = Column(Numeric(24, 8), nullable=False)
    status = Column(SQLEnum(TransactionStatus, name="transaction_status", create_constraint=True), nullable=False, default=TransactionStatus.PENDING, index=True)
    method = Column(String(50), nullable=False)  # bank_transfer, crypto, card, balance, ...
    description = Column(Text, nullable=True)

    # Deposit / withdrawal details supplied by the user
    transaction_ref = Column(String(255), nullable=True)
    payment_proof_url = Column(String(1024), nullable=True)
    withdrawal_address = Column(String(255), nullable=True)
    withdrawal_details = Column(JSON, nullable=True)

    # Admin review
    admin_notes = Column(Text, nullable=True)
    reviewed_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", name="fk_transactions_reviewed_by"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    investment_id = Column(Uuid(as_uuid=True), ForeignKey("investments.id", name="fk_transactions_investment_id"), nullable=True, index=True)

    investment = relationship("Investment", foreign_keys=[investment_id], lazy="select")

    __table_args__ = (
        CheckConstraint('amount > 0', name='check_transactions_amount_positive'),
        UniqueConstraint('investment_id', 'type', name='uq_transactions_investment_type'),
        Index('ix_transactions_status_created_at', 'status', 'created_at'),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_TRANSACTION_STATUSES
