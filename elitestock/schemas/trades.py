"""
Trade and copy-trading API request/response schemas
"""

from decimal import Decimal
from uuid import UUID
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from elitestock.core.trading.models import CopyStatus, TradeStatus, TradeType


class CreateTradeRequest(BaseModel):
    """Request schema for placing a trade"""
    user_id: UUID = Field(..., description="Trading user UUID")
    asset_id: UUID = Field(..., description="Asset UUID")
    type: TradeType = Field(..., description="buy or sell")
    amount: Decimal = Field(..., gt=0, description="Quantity")
    price: Optional[Decimal] = Field(None, gt=0, description="Execution price (default: asset's current price)")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "123e4567-e89b-12d3-a456-426614174000",
                "asset_id": "123e4567-e89b-12d3-a456-426614174001",
                "type": "buy",
                "amount": "10",
                "price": "182.50",
            }
        }


class TradeResponse(BaseModel):
    id: UUID
    user_id: UUID
    asset_id: UUID
    type: TradeType
    amount: Decimal
    price: Decimal
    status: TradeStatus
    executed_at: Optional[datetime] = None
    copied_from_trade_id: Optional[UUID] = None
    failure_reason: Optional[str] = None
    failed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TradeExecutionResponse(BaseModel):
    """Result of executing a trade and dispatching follower copies"""
    trade: TradeResponse
    executed: bool = Field(..., description="False if the trade had already left PENDING")
    copies_created: int = 0
    executed_copy_ids: List[UUID] = Field(default_factory=list)
    failed_copy_ids: List[UUID] = Field(default_factory=list)


class FollowTraderRequest(BaseModel):
    follower_id: UUID = Field(..., description="Follower user UUID")
    trader_id: UUID = Field(..., description="Trader profile UUID")
    allocation_percentage: Decimal = Field(default=Decimal("100"), ge=1, le=100, description="Share of each trade to copy")


class UpdateCopyStatusRequest(BaseModel):
    status: CopyStatus = Field(..., description="active, paused or stopped")


class CopyRelationshipResponse(BaseModel):
    id: UUID
    follower_id: UUID
    trader_id: UUID
    allocation_percentage: Decimal
    status: CopyStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
