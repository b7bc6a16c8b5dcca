"""
Admin investment plan management - INTERNAL ONLY
"""

from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from elitestock.infrastructure.database import get_db
from elitestock.schemas.investments import CreatePlanRequest, InvestmentPlanResponse, UpdatePlanRequest
from elitestock.services.investment_service import create_plan, list_plans, update_plan

router = APIRouter()


@router.get(
    "/investment-plans",
    response_model=List[InvestmentPlanResponse],
    summary="List all investment plans (active and inactive)",
)
def get_plans(db: Session = Depends(get_db)) -> List[InvestmentPlanResponse]:
    return [InvestmentPlanResponse.model_validate(p) for p in list_plans(db=db, include_inactive=True)]


@router.post(
    "/investment-plans",
    response_model=InvestmentPlanResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an investment plan",
)
def post_plan(
    request: CreatePlanRequest,
    db: Session = Depends(get_db),
) -> InvestmentPlanResponse:
    plan = create_plan(db=db, **request.model_dump())
    return InvestmentPlanResponse.model_validate(plan)


@router.patch(
    "/investment-plans/{plan_id}",
    response_model=InvestmentPlanResponse,
    summary="Update an investment plan",
    description="Open investments keep the terms they were opened with.",
)
def patch_plan(
    plan_id: UUID,
    request: UpdatePlanRequest,
    db: Session = Depends(get_db),
) -> InvestmentPlanResponse:
    plan = update_plan(db=db, plan_id=plan_id, **request.model_dump(exclude_unset=True))
    return InvestmentPlanResponse.model_validate(plan)
