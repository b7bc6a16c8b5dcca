"""
Global exception handlers

Every error leaves the API in one envelope:
    {"error": {"code": ..., "message": ..., "trace_id": ...}}
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from elitestock.services.exceptions import CoreError, InsufficientFunds, InvalidState, NotFound, ValidationError
from elitestock.utils.trace_id import get_trace_id

logger = logging.getLogger(__name__)

CORE_ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    InsufficientFunds: status.HTTP_402_PAYMENT_REQUIRED,
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidState: status.HTTP_409_CONFLICT,
}


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Optional[Any] = None,
) -> JSONResponse:
    error: Dict[str, Any] = {
        "code": code,
        "message": message,
        "trace_id": get_trace_id(request),
    }
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


async def core_error_handler(request: Request, exc: CoreError) -> JSONResponse:
    """Map the service error taxonomy to 400/402/404/409"""
    status_code = next(
        (code for cls, code in CORE_ERROR_STATUS.items() if isinstance(exc, cls)),
        status.HTTP_400_BAD_REQUEST,
    )
    details = None
    if isinstance(exc, InsufficientFunds) and exc.required is not None:
        details = {"balance": str(exc.balance), "required": str(exc.required)}
    return _error_response(request, status_code, exc.code, exc.message, details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions"""
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(request, exc.status_code, f"HTTP_{exc.status_code}", message)


def _jsonable(obj):
    """Recursively convert non-JSON-serializable objects in error details to strings"""
    if isinstance(obj, (Decimal, Exception, type)):
        return str(obj)
    if isinstance(obj, dict):
        return {key: _jsonable(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_jsonable(item) for item in obj]
    return obj


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body / query validation errors"""
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed",
        _jsonable(exc.errors()),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions (database errors included) without leaking details"""
    trace_id = get_trace_id(request)
    logger.exception("Unhandled exception", exc_info=exc, extra={"trace_id": trace_id})
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )
