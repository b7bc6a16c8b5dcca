"""
Investments API endpoints
"""

from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from elitestock.infrastructure.database import get_db
from elitestock.core.users.models import User
from elitestock.schemas.investments import InvestmentPlanResponse, InvestmentResponse, OpenInvestmentRequest
from elitestock.services.exceptions import NotFound
from elitestock.services.investment_service import list_plans, list_user_investments, open_investment

router = APIRouter()


@router.get(
    "/investment-plans",
    response_model=List[InvestmentPlanResponse],
    summary="List active investment plans",
)
def get_investment_plans(db: Session = Depends(get_db)) -> List[InvestmentPlanResponse]:
    return [InvestmentPlanResponse.model_validate(p) for p in list_plans(db=db)]


@router.post(
    "/investments",
    response_model=InvestmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open an investment",
    description="Debits the principal now; principal + profit is credited when the lock period ends.",
)
def create_investment(
    request: OpenInvestmentRequest,
    db: Session = Depends(get_db),
) -> InvestmentResponse:
    investment = open_investment(
        db=db,
        user_id=request.user_id,
        plan_id=request.plan_id,
        amount=request.amount,
    )
    return InvestmentResponse.model_validate(investment)


@router.get(
    "/users/{user_id}/investments",
    response_model=List[InvestmentResponse],
    summary="List a user's investments",
)
def get_user_investments(
    user_id: UUID,
    db: Session = Depends(get_db),
) -> List[InvestmentResponse]:
    if db.get(User, user_id) is None:
        raise NotFound(f"User {user_id} not found")
    return [InvestmentResponse.model_validate(i) for i in list_user_investments(db=db, user_id=user_id)]
