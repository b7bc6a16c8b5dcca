"""
Copy trading API endpoints - follow / pause / resume / stop
"""

from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from elitestock.infrastructure.database import get_db
from elitestock.schemas.trades import CopyRelationshipResponse, FollowTraderRequest, UpdateCopyStatusRequest
from elitestock.services.copy_trading import follow_trader, set_copy_status

router = APIRouter()


@router.post(
    "/copy-relationships",
    response_model=CopyRelationshipResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start copying a trader",
)
def create_copy_relationship(
    request: FollowTraderRequest,
    db: Session = Depends(get_db),
) -> CopyRelationshipResponse:
    relationship = follow_trader(
        db=db,
        follower_id=request.follower_id,
        trader_id=request.trader_id,
        allocation_percentage=request.allocation_percentage,
    )
    return CopyRelationshipResponse.model_validate(relationship)


@router.patch(
    "/copy-relationships/{relationship_id}",
    response_model=CopyRelationshipResponse,
    summary="Pause, resume or stop copying",
    description="STOPPED is terminal; further changes return 409.",
)
def update_copy_relationship(
    relationship_id: UUID,
    request: UpdateCopyStatusRequest,
    db: Session = Depends(get_db),
) -> CopyRelationshipResponse:
    relationship = set_copy_status(db=db, relationship_id=relationship_id, status=request.status)
    return CopyRelationshipResponse.model_validate(relationship)
