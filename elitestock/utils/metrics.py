"""
Prometheus metrics for observability
"""

import re
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client.core import CollectorRegistry

# Create a custom registry to avoid conflicts
metrics_registry = CollectorRegistry()

# HTTP request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["path", "method", "status"],
    registry=metrics_registry,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["path", "method"],
    registry=metrics_registry,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Ledger metrics
ledger_adjustments_total = Counter(
    "ledger_adjustments_total",
    "Total balance adjustments applied",
    ["direction"],  # credit, debit
    registry=metrics_registry,
)

insufficient_funds_total = Counter(
    "insufficient_funds_total",
    "Total operations rejected for insufficient funds",
    ["operation"],  # trade, investment, withdrawal_review, withdrawal_request
    registry=metrics_registry,
)

ledger_invariant_violations_total = Counter(
    "ledger_invariant_violations_total",
    "Total ledger invariant violations detected",
    registry=metrics_registry,
)

# Trade metrics
trades_executed_total = Counter(
    "trades_executed_total",
    "Total trades executed",
    ["type", "origin"],  # origin: original, copy
    registry=metrics_registry,
)

copy_trades_created_total = Counter(
    "copy_trades_created_total",
    "Total follower copy trades created by fan-out",
    registry=metrics_registry,
)

trades_failed_total = Counter(
    "trades_failed_total",
    "Total trades moved to FAILED",
    ["reason"],
    registry=metrics_registry,
)

# Investment metrics
investments_opened_total = Counter(
    "investments_opened_total",
    "Total investments opened",
    registry=metrics_registry,
)

investments_settled_total = Counter(
    "investments_settled_total",
    "Total investments matured by the settlement sweep",
    registry=metrics_registry,
)

settlement_errors_total = Counter(
    "settlement_errors_total",
    "Total per-investment settlement failures",
    registry=metrics_registry,
)

settlement_sweep_duration_seconds = Histogram(
    "settlement_sweep_duration_seconds",
    "Settlement sweep duration in seconds",
    registry=metrics_registry,
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0),
)

# Review metrics
transaction_reviews_total = Counter(
    "transaction_reviews_total",
    "Total admin transaction reviews",
    ["action", "type"],  # approve/reject, deposit/withdrawal
    registry=metrics_registry,
)


def record_http_request(
    path: str,
    method: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """
    Record HTTP request metrics.

    Args:
        path: Request path (normalized)
        method: HTTP method
        status_code: Response status code
        duration_seconds: Request duration in seconds
    """
    normalized_path = _normalize_path(path)

    http_requests_total.labels(
        path=normalized_path,
        method=method.upper(),
        status=str(status_code),
    ).inc()

    http_request_duration_seconds.labels(
        path=normalized_path,
        method=method.upper(),
    ).observe(duration_seconds)


def record_ledger_adjustment(direction: str) -> None:
    ledger_adjustments_total.labels(direction=direction).inc()


def record_insufficient_funds(operation: str) -> None:
    """
    Record an operation rejected by the non-negative balance check.

    Args:
        operation: trade, investment, withdrawal_review, withdrawal_request
    """
    insufficient_funds_total.labels(operation=operation).inc()


def record_ledger_invariant_violation() -> None:
    """Record ledger invariant violation"""
    ledger_invariant_violations_total.inc()


def record_trade_executed(trade_type: str, is_copy: bool) -> None:
    trades_executed_total.labels(type=trade_type, origin="copy" if is_copy else "original").inc()


def record_copy_trades_created(count: int) -> None:
    if count:
        copy_trades_created_total.inc(count)


def record_trade_failed(reason: str) -> None:
    trades_failed_total.labels(reason=reason).inc()


def record_investment_opened() -> None:
    investments_opened_total.inc()


def record_settlement(processed: int, errors: int, duration_seconds: float) -> None:
    """Record the outcome of one settlement sweep"""
    if processed:
        investments_settled_total.inc(processed)
    if errors:
        settlement_errors_total.inc(errors)
    settlement_sweep_duration_seconds.observe(duration_seconds)


def record_transaction_review(action: str, transaction_type: str) -> None:
    transaction_reviews_total.labels(action=action, type=transaction_type).inc()


def _normalize_path(path: str) -> str:
    """
    Normalize path for metrics (replace UUIDs and IDs with placeholders).

    Examples:
        /api/v1/investments -> /api/v1/investments
        /api/v1/trades/123e4567-.../execute -> /api/v1/trades/{id}/execute
    """
    path = re.sub(
        r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}',
        '{id}',
        path,
        flags=re.IGNORECASE,
    )

    # Replace numeric IDs (if any remain)
    path = re.sub(r'/\d+', '/{id}', path)

    return path


def get_metrics_output() -> bytes:
    """Get Prometheus metrics output"""
    return generate_latest(metrics_registry)


__all__ = ["CONTENT_TYPE_LATEST", "get_metrics_output", "metrics_registry"]
