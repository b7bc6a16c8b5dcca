"""
Request logging middleware - one structured log line and metrics per request
"""

import time
import logging
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from elitestock.infrastructure.logging_config import trace_id_context
from elitestock.utils.metrics import record_http_request

logger = logging.getLogger(__name__)

# Probes and scrapes would drown the request log
QUIET_PATHS = frozenset(("/health", "/ready", "/metrics"))


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log fields: trace_id, path, method, status_code, duration_ms and, for
    routes scoped to a user, user_id.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        status_code = 500
        error = None

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as e:
            error = str(e)
            raise
        finally:
            duration_seconds = time.perf_counter() - start_time
            path = request.url.path

            log_data = {
                "trace_id": trace_id_context.get(),
                "path": path,
                "method": request.method,
                "status_code": status_code,
                "duration_ms": round(duration_seconds * 1000, 2),
            }
            user_id = request.path_params.get("user_id")
            if user_id:
                log_data["user_id"] = str(user_id)

            if error:
                log_data["error"] = error
                logger.error("Request failed", extra=log_data)
            elif status_code >= 500:
                logger.error("Request failed", extra=log_data)
            elif status_code >= 400:
                logger.warning("Request client error", extra=log_data)
            elif path not in QUIET_PATHS:
                logger.info("Request completed", extra=log_data)

            record_http_request(
                path=path,
                method=request.method,
                status_code=status_code,
                duration_seconds=duration_seconds,
            )
