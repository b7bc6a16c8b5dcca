"""
Transactions API endpoints - deposit / withdrawal requests and history
"""

from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from elitestock.infrastructure.database import get_db
from elitestock.core.transactions.models import TransactionStatus
from elitestock.core.users.models import User
from elitestock.schemas.transactions import CreateTransactionRequest, TransactionResponse
from elitestock.services.exceptions import NotFound
from elitestock.services.transaction_review import create_transaction_request, list_transactions

router = APIRouter()


@router.post(
    "/transactions",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a deposit or withdrawal",
    description="Created PENDING. The balance changes only when an admin approves the request.",
)
def request_transaction(
    request: CreateTransactionRequest,
    db: Session = Depends(get_db),
) -> TransactionResponse:
    transaction = create_transaction_request(
        db=db,
        user_id=request.user_id,
        transaction_type=request.type,
        amount=request.amount,
        method=request.method,
        description=request.description,
        transaction_ref=request.transaction_ref,
        payment_proof_url=request.payment_proof_url,
        withdrawal_address=request.withdrawal_address,
        withdrawal_details=request.withdrawal_details,
    )
    return TransactionResponse.model_validate(transaction)


@router.get(
    "/users/{user_id}/transactions",
    response_model=List[TransactionResponse],
    summary="List a user's transactions",
)
def get_user_transactions(
    user_id: UUID,
    transaction_status: Optional[TransactionStatus] = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
) -> List[TransactionResponse]:
    if db.get(User, user_id) is None:
        raise NotFound(f"User {user_id} not found")
    transactions = list_transactions(db=db, status=transaction_status, user_id=user_id, limit=limit)
    return [TransactionResponse.model_validate(t) for t in transactions]
