"""
Common Pydantic schemas
"""

from typing import Any, Optional
from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response"""
    status: str


class ReadyResponse(BaseModel):
    """Readiness check response"""
    status: str
    database: str
    redis: str


class ErrorBody(BaseModel):
    code: str
    message: str
    trace_id: Optional[str] = None
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing endpoint"""
    error: ErrorBody


# OpenAPI `responses` for routers whose endpoints raise service errors
ERROR_RESPONSES = {
    code: {"model": ErrorResponse} for code in (400, 402, 404, 409, 422)
}
