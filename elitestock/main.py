"""
FastAPI application entry point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from elitestock.infrastructure.settings import get_settings
from elitestock.infrastructure.logging_config import setup_logging
from elitestock.infrastructure.database import SessionLocal
from elitestock.api.exceptions import (
    core_error_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler,
)
from elitestock.api.public.health import router as health_router
from elitestock.api.public.metrics import router as metrics_router
from elitestock.api.v1 import router as api_v1_router
from elitestock.api.admin import router as admin_router
from elitestock.services.events import event_bus, register_notification_subscribers
from elitestock.services.exceptions import CoreError
from elitestock.utils.trace_id import TraceIDMiddleware
from elitestock.utils.request_logging import RequestLoggingMiddleware
from elitestock.workers.scheduler import SettlementScheduler

# Get settings
settings = get_settings()

# Setup logging
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start/stop the settlement scheduler and wire notification subscribers."""
    if settings.NOTIFICATIONS_ENABLED:
        register_notification_subscribers(event_bus, settings.NOTIFICATION_QUEUE)

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = SettlementScheduler(session_factory=SessionLocal, settings=settings, events=event_bus)
        scheduler.start()
    else:
        logger.info("Settlement scheduler disabled (SCHEDULER_ENABLED=false)")
    app.state.scheduler = scheduler

    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.stop()


# Create FastAPI app
app = FastAPI(
    title="EliteStock Core API",
    description="Ledger, trading and settlement core for the EliteStock platform",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

if settings.CORS_ENABLED:
    cors_origins = settings.cors_allow_origins_list
    if not cors_origins:
        logger.warning(
            "CORS_ENABLED=True but CORS_ALLOW_ORIGINS is empty or not set. "
            "Set CORS_ALLOW_ORIGINS (comma-separated, e.g. 'http://localhost:3000,http://localhost:5000')."
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=settings.cors_allow_methods_list or ["*"],
        allow_headers=settings.cors_allow_headers_list or ["*"],
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    )

# Add custom middlewares (order matters - last added is outermost)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(TraceIDMiddleware)

# Register exception handlers
app.add_exception_handler(CoreError, core_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Register routers
app.include_router(health_router)
app.include_router(metrics_router)
app.include_router(api_v1_router)
app.include_router(admin_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": "EliteStock Core API",
        "version": "1.0.0",
        "status": "running",
    }
