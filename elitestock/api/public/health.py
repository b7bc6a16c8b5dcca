"""
Health check endpoints
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from elitestock.infrastructure.database import get_db
from elitestock.infrastructure.redis_client import ping_redis
from elitestock.infrastructure.settings import get_settings
from elitestock.schemas.common import ReadyResponse, HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health():
    """Basic health check"""
    return {"status": "ok"}


@router.get("/ready", response_model=ReadyResponse, responses={503: {"model": ReadyResponse}})
def ready(db: Session = Depends(get_db)):
    """
    Readiness check - verifies DB connectivity, and Redis when notifications
    are enabled

    Returns:
    - 200 if all services are ready
    - 503 if any service is not ready
    """
    settings = get_settings()
    checks = {
        "status": "ok",
        "database": "unknown",
        "redis": "not_required",
    }

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "connected"
    except SQLAlchemyError as e:
        checks["database"] = f"error: {str(e)}"
        checks["status"] = "not_ready"

    if settings.NOTIFICATIONS_ENABLED:
        if ping_redis():
            checks["redis"] = "connected"
        else:
            checks["redis"] = "disconnected"
            checks["status"] = "not_ready"

    status_code = 200 if checks["status"] == "ok" else 503
    return JSONResponse(status_code=status_code, content=checks)
