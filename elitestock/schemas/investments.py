"""
Investment API request/response schemas
"""

from decimal import Decimal
from uuid import UUID
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, Field

from elitestock.core.investments.models import InvestmentStatus, PlanStatus


class OpenInvestmentRequest(BaseModel):
    """Request schema for opening an investment"""
    user_id: UUID = Field(..., description="Investing user UUID")
    plan_id: UUID = Field(..., description="Investment plan UUID")
    amount: Decimal = Field(..., gt=0, description="Principal (must be <= balance and within plan limits)")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "123e4567-e89b-12d3-a456-426614174000",
                "plan_id": "123e4567-e89b-12d3-a456-426614174001",
                "amount": "500.00",
            }
        }


class InvestmentResponse(BaseModel):
    id: UUID
    user_id: UUID
    plan_id: UUID
    amount: Decimal
    roi_percentage: Decimal
    lock_period_days: int
    status: InvestmentStatus
    start_date: datetime
    end_date: datetime
    profit: Optional[Decimal] = None
    total_return: Optional[Decimal] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CreatePlanRequest(BaseModel):
    """Request schema for creating an investment plan (admin only)"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    min_amount: Decimal = Field(..., ge=0)
    max_amount: Optional[Decimal] = Field(None, ge=0, description="Upper bound; null or 0 means unbounded")
    roi_percentage: Decimal = Field(..., ge=0, description="Flat return over the lock period, in percent")
    lock_period_days: int = Field(..., gt=0)
    features: Optional[List[Any]] = None
    status: PlanStatus = PlanStatus.ACTIVE


class UpdatePlanRequest(BaseModel):
    """Partial update - only fields sent are changed"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    min_amount: Optional[Decimal] = Field(None, ge=0)
    max_amount: Optional[Decimal] = Field(None, ge=0)
    roi_percentage: Optional[Decimal] = Field(None, ge=0)
    lock_period_days: Optional[int] = Field(None, gt=0)
    features: Optional[List[Any]] = None
    status: Optional[PlanStatus] = None


class InvestmentPlanResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    min_amount: Decimal
    max_amount: Optional[Decimal] = None
    roi_percentage: Decimal
    lock_period_days: int
    features: Optional[List[Any]] = None
    status: PlanStatus

    class Config:
        from_attributes = True
