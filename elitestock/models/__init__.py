"""
Models registry - Import all models here to ensure Base.metadata is complete

Used by Alembic and by the test fixtures (Base.metadata.create_all).
Import order follows foreign key dependencies:
1. Base
2. Models without foreign keys (User, Asset, InvestmentPlan)
3. Models with foreign keys, in dependency order
"""

from elitestock.infrastructure.database import Base

from elitestock.core.users.models import User, KycStatus, UserRole
from elitestock.core.markets.models import Asset, AssetType
from elitestock.core.investments.models import InvestmentPlan, PlanStatus, Investment, InvestmentStatus
from elitestock.core.trading.models import (
    Trader, TraderStatus,
    CopyRelationship, CopyStatus,
    Trade, TradeType, TradeStatus, TradeFailureReason,
)
from elitestock.core.transactions.models import Transaction, TransactionType, TransactionStatus

__all__ = [
    "Base",
    "User",
    "KycStatus",
    "UserRole",
    "Asset",
    "AssetType",
    "InvestmentPlan",
    "PlanStatus",
    "Investment",
    "InvestmentStatus",
    "Trader",
    "TraderStatus",
    "CopyRelationship",
    "CopyStatus",
    "Trade",
    "TradeType",
    "TradeStatus",
    "TradeFailureReason",
    "Transaction",
    "TransactionType",
    "TransactionStatus",
]
