"""
API v1 routes - User-facing API
"""

from fastapi import APIRouter
from elitestock.infrastructure.settings import get_settings
from elitestock.schemas.common import ERROR_RESPONSES
from elitestock.api.v1.trades import router as trades_router
from elitestock.api.v1.copy_trading import router as copy_trading_router
from elitestock.api.v1.investments import router as investments_router
from elitestock.api.v1.transactions import router as transactions_router

settings = get_settings()

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["api-v1"], responses=ERROR_RESPONSES)

# Register sub-routers
router.include_router(trades_router, tags=["trades"])
router.include_router(copy_trading_router, tags=["copy-trading"])
router.include_router(investments_router, tags=["investments"])
router.include_router(transactions_router, tags=["transactions"])
