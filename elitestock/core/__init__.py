"""
Core domain models - Export all models for Alembic
"""

from elitestock.core.users.models import User
from elitestock.core.markets.models import Asset
from elitestock.core.trading.models import Trader, CopyRelationship, Trade
from elitestock.core.investments.models import InvestmentPlan, Investment
from elitestock.core.transactions.models import Transaction

__all__ = ["User", "Asset", "Trader", "CopyRelationship", "Trade", "InvestmentPlan", "Investment", "Transaction"]
