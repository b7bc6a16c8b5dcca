"""
Balance Ledger - The only code path that mutates User.balance
"""

import enum
import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from elitestock.core.common.money import is_money_precision
from elitestock.core.users.models import User
from elitestock.infrastructure.database import lock_row
from elitestock.services.exceptions import InsufficientFunds, NotFound, ValidationError
from elitestock.utils.metrics import record_ledger_adjustment, record_ledger_invariant_violation

logger = logging.getLogger(__name__)


class BalanceDirection(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"


def adjust_balance(
    *,
    db: Session,
    user_id: UUID,
    amount: Decimal,
    direction: BalanceDirection,
) -> Decimal:
    """
    Apply a signed delta to a user's balance.

    The user row is locked with SELECT ... FOR UPDATE inside the caller's
    transaction and stays locked until the caller commits or rolls back.
    This function flushes but never commits: the caller's unit of work
    commits the new balance together with its Transaction / Trade /
    Investment rows.

    Raises:
        ValidationError: amount is not strictly positive or has more than
            8 decimal places
        NotFound: user does not exist
        InsufficientFunds: a debit would take the balance below zero
            (balance is left untouched)

    Returns the new balance.
    """
    amount = Decimal(amount)
    if amount <= 0:
        raise ValidationError(f"Balance adjustment must be positive, got {amount}")
    if not is_money_precision(amount):
        raise ValidationError(f"Balance adjustment {amount} has more than 8 decimal places")

    user = lock_row(db, User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")

    balance = Decimal(user.balance or 0)
    if balance < 0:
        # Written outside the ledger; debits below still fail, credits repair it
        record_ledger_invariant_violation()
        logger.error(
            f"Ledger invariant violated for user {user_id}: stored balance is {balance}",
            extra={"user_id": str(user_id)},
        )

    if direction == BalanceDirection.CREDIT:
        new_balance = balance + amount
    else:
        new_balance = balance - amount
        if new_balance < 0:
            raise InsufficientFunds(
                f"Insufficient balance for user {user_id}: {balance} < {amount}",
                balance=balance,
                required=amount,
            )

    user.balance = new_balance
    db.flush()

    record_ledger_adjustment(direction.value)
    logger.debug(
        f"Balance {direction.value} {amount} for user {user_id}: {balance} -> {new_balance}",
        extra={"user_id": str(user_id), "direction": direction.value, "amount": str(amount)},
    )
    return new_balance


def get_balance(*, db: Session, user_id: UUID) -> Decimal:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return Decimal(user.balance or 0)
