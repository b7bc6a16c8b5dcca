"""
Admin transaction review endpoints - INTERNAL ONLY
"""

from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from elitestock.infrastructure.database import get_db
from elitestock.core.transactions.models import TransactionStatus
from elitestock.schemas.transactions import ReviewTransactionRequest, TransactionResponse
from elitestock.services.transaction_review import list_transactions, review_transaction

router = APIRouter()


@router.get(
    "/transactions",
    response_model=List[TransactionResponse],
    summary="Review queue",
    description="List transactions, newest first. Use status=pending for the review queue.",
)
def get_transactions(
    transaction_status: Optional[TransactionStatus] = Query(default=None, alias="status"),
    user_id: Optional[UUID] = Query(default=None),
    limit: int = Query(default=200, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> List[TransactionResponse]:
    transactions = list_transactions(db=db, status=transaction_status, user_id=user_id, limit=limit)
    return [TransactionResponse.model_validate(t) for t in transactions]


@router.post(
    "/transactions/{transaction_id}/review",
    response_model=TransactionResponse,
    summary="Approve or reject a deposit / withdrawal",
    description=(
        "Approving a deposit credits the balance, approving a withdrawal debits it. "
        "Returns 409 if the transaction was already reviewed and 402 if a withdrawal "
        "exceeds the current balance (the transaction stays pending)."
    ),
)
def review(
    transaction_id: UUID,
    request: ReviewTransactionRequest,
    db: Session = Depends(get_db),
) -> TransactionResponse:
    transaction = review_transaction(
        db=db,
        transaction_id=transaction_id,
        action=request.action,
        reviewer_id=request.reviewer_id,
        notes=request.notes,
    )
    return TransactionResponse.model_validate(transaction)
