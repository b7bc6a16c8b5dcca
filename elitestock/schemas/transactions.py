"""
Transaction API request/response schemas
"""

from decimal import Decimal
from uuid import UUID
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator

from elitestock.core.transactions.models import TransactionStatus, TransactionType
from elitestock.services.transaction_review import ReviewAction


class CreateTransactionRequest(BaseModel):
    """Deposit or withdrawal request - created PENDING for admin review"""
    user_id: UUID
    type: TransactionType = Field(..., description="deposit or withdrawal")
    amount: Decimal = Field(..., gt=0)
    method: str = Field(..., min_length=1, max_length=50, description="bank_transfer, crypto, card, ...")
    description: Optional[str] = None
    transaction_ref: Optional[str] = Field(None, max_length=255)
    payment_proof_url: Optional[str] = Field(None, max_length=1024)
    withdrawal_address: Optional[str] = Field(None, max_length=255)
    withdrawal_details: Optional[Dict[str, Any]] = None

    @field_validator('type')
    @classmethod
    def validate_type(cls, v: TransactionType) -> TransactionType:
        if v not in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
            raise ValueError("Only deposit and withdrawal requests can be created")
        return v


class ReviewTransactionRequest(BaseModel):
    """Admin review decision"""
    action: ReviewAction = Field(..., description="approve or reject")
    reviewer_id: UUID = Field(..., description="Admin user UUID")
    notes: Optional[str] = Field(None, description="Admin notes, shown to the user on rejection")

    class Config:
        json_schema_extra = {
            "example": {
                "action": "approve",
                "reviewer_id": "123e4567-e89b-12d3-a456-426614174000",
                "notes": "Bank transfer received",
            }
        }


class TransactionResponse(BaseModel):
    id: UUID
    user_id: UUID
    type: TransactionType
    amount: Decimal
    status: TransactionStatus
    method: str
    description: Optional[str] = None
    transaction_ref: Optional[str] = None
    withdrawal_address: Optional[str] = None
    admin_notes: Optional[str] = None
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    investment_id: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
