"""
Transaction Review Workflow - Deposit / withdrawal requests and admin review

Requests are created PENDING with no ledger effect. Approval applies the
balance change and the terminal status in one unit of work; rejection only
changes the status.
"""

import enum
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from elitestock.core.common.money import is_money_precision
from elitestock.core.transactions.models import (
    REVIEWABLE_TRANSACTION_TYPES,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from elitestock.core.users.models import User
from elitestock.infrastructure.database import lock_row, unit_of_work
from elitestock.services.events import EventBus, EventType, publish
from elitestock.services.exceptions import InsufficientFunds, InvalidState, NotFound, ValidationError
from elitestock.services.ledger import BalanceDirection, adjust_balance
from elitestock.utils.metrics import record_insufficient_funds, record_transaction_review

logger = logging.getLogger(__name__)


class ReviewAction(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"


def create_transaction_request(
    *,
    db: Session,
    user_id: UUID,
    transaction_type: TransactionType,
    amount: Decimal,
    method: str,
    description: Optional[str] = None,
    transaction_ref: Optional[str] = None,
    payment_proof_url: Optional[str] = None,
    withdrawal_address: Optional[str] = None,
    withdrawal_details: Optional[Dict[str, Any]] = None,
) -> Transaction:
    """
    Create a PENDING deposit or withdrawal request.

    The balance is not touched. A withdrawal larger than the current balance
    is refused up front; the balance is checked again at approval time.
    """
    transaction_type = TransactionType(transaction_type)
    if transaction_type not in REVIEWABLE_TRANSACTION_TYPES:
        raise ValidationError(f"Cannot request a {transaction_type.value} transaction")

    amount = Decimal(amount)
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    if not is_money_precision(amount):
        raise ValidationError("Amount has more than 8 decimal places")
    if not method:
        raise ValidationError("Payment method is required")

    user = db.get(User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")

    if transaction_type == TransactionType.WITHDRAWAL and amount > Decimal(user.balance or 0):
        record_insufficient_funds("withdrawal_request")
        raise InsufficientFunds(
            f"Insufficient balance for withdrawal: {user.balance} < {amount}",
            balance=Decimal(user.balance or 0),
            required=amount,
        )

    transaction = Transaction(
        user_id=user_id,
        type=transaction_type,
        amount=amount,
        status=TransactionStatus.PENDING,
        method=method,
        description=description,
        transaction_ref=transaction_ref,
        payment_proof_url=payment_proof_url,
        withdrawal_address=withdrawal_address,
        withdrawal_details=withdrawal_details,
    )
    db.add(transaction)
    db.commit()
    db.refresh(transaction)

    logger.info(f"{transaction_type.value.capitalize()} request {transaction.id} created: user={user_id} amount={amount}")
    return transaction


def review_transaction(
    *,
    db: Session,
    transaction_id: UUID,
    action: ReviewAction,
    reviewer_id: UUID,
    notes: Optional[str] = None,
    events: Optional[EventBus] = None,
) -> Transaction:
    """
    Approve or reject a PENDING deposit / withdrawal.

    - approve deposit: credit amount, status COMPLETED
    - approve withdrawal: debit amount, status COMPLETED
    - reject: status FAILED, no balance change

    Raises:
        NotFound: transaction missing
        InvalidState: transaction already reviewed (terminal)
        ValidationError: not a reviewable transaction type
        InsufficientFunds: withdrawal exceeds the current balance; the
            transaction stays PENDING and nothing is written
    """
    action = ReviewAction(action)
    now = datetime.now(timezone.utc)

    with unit_of_work(db):
        transaction = lock_row(db, Transaction, transaction_id)
        if transaction is None:
            raise NotFound(f"Transaction {transaction_id} not found")
        if transaction.status != TransactionStatus.PENDING:
            raise InvalidState(
                f"Transaction {transaction_id} is already {transaction.status.value}"
            )
        if transaction.type not in REVIEWABLE_TRANSACTION_TYPES:
            raise ValidationError(f"{transaction.type.value} transactions are not reviewable")

        if action == ReviewAction.APPROVE:
            direction = (
                BalanceDirection.CREDIT
                if transaction.type == TransactionType.DEPOSIT
                else BalanceDirection.DEBIT
            )
            try:
                adjust_balance(
                    db=db,
                    user_id=transaction.user_id,
                    amount=transaction.amount,
                    direction=direction,
                )
            except InsufficientFunds:
                record_insufficient_funds("withdrawal_review")
                raise
            transaction.status = TransactionStatus.COMPLETED
            transaction.completed_at = now
        else:
            transaction.status = TransactionStatus.FAILED

        transaction.reviewed_by = reviewer_id
        transaction.reviewed_at = now
        if notes is not None:
            transaction.admin_notes = notes

        transaction_type = transaction.type
        user_id = transaction.user_id
        amount = transaction.amount

    db.refresh(transaction)
    record_transaction_review(action.value, transaction_type.value)
    logger.info(
        f"Transaction {transaction_id} reviewed ({action.value}) by {reviewer_id}: "
        f"{transaction_type.value} {amount} -> {transaction.status.value}",
        extra={"transaction_id": str(transaction_id), "reviewer_id": str(reviewer_id)},
    )

    user = db.get(User, user_id)
    publish(
        events,
        EventType.TRANSACTION_REVIEWED,
        transaction_id=str(transaction_id),
        user_id=str(user_id),
        email=user.email if user is not None else None,
        transaction_type=transaction_type.value,
        action=action.value,
        status=transaction.status.value,
        amount=str(amount),
        notes=notes,
    )
    return transaction


def list_transactions(
    *,
    db: Session,
    status: Optional[TransactionStatus] = None,
    user_id: Optional[UUID] = None,
    limit: int = 200,
) -> List[Transaction]:
    stmt = select(Transaction).order_by(Transaction.created_at.desc()).limit(limit)
    if status is not None:
        stmt = stmt.where(Transaction.status == TransactionStatus(status))
    if user_id is not None:
        stmt = stmt.where(Transaction.user_id == user_id)
    return list(db.execute(stmt).scalars().all())
