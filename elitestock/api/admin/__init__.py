"""
Admin API routes - INTERNAL ONLY
"""

from fastapi import APIRouter
from elitestock.infrastructure.settings import get_settings
from elitestock.schemas.common import ERROR_RESPONSES
from elitestock.api.admin.transactions import router as transactions_router
from elitestock.api.admin.investment_plans import router as investment_plans_router

settings = get_settings()
router = APIRouter(prefix=settings.ADMIN_V1_PREFIX, tags=["admin-v1"], responses=ERROR_RESPONSES)

# Register admin routers
router.include_router(transactions_router, tags=["admin-transactions"])
router.include_router(investment_plans_router, tags=["admin-investment-plans"])
