"""
Prometheus metrics endpoint
"""

from fastapi import APIRouter
from fastapi.responses import Response

from elitestock.utils.metrics import get_metrics_output, CONTENT_TYPE_LATEST

router = APIRouter(tags=["metrics"])


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    description="Expose ledger, settlement and HTTP metrics in Prometheus exposition format.",
)
def get_metrics() -> Response:
    return Response(content=get_metrics_output(), media_type=CONTENT_TYPE_LATEST)
