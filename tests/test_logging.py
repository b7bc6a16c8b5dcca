"""
Tests for structured JSON logging
"""

import json
import logging
import sys
from decimal import Decimal
from uuid import uuid4

from elitestock.infrastructure.logging_config import (
    JSONFormatter,
    job_context,
    job_scope,
    trace_id_context,
)


def _format(msg="Trade executed", exc_info=None, **extra) -> dict:
    record = logging.LogRecord(
        name="elitestock.services.trade_engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(JSONFormatter().format(record))


def test_base_fields():
    data = _format()

    assert data["level"] == "INFO"
    assert data["logger"] == "elitestock.services.trade_engine"
    assert data["message"] == "Trade executed"
    assert data["timestamp"].endswith("Z")
    assert "trace_id" not in data
    assert "job" not in data


def test_domain_ids_are_emitted_as_strings():
    trade_id = uuid4()
    user_id = uuid4()

    data = _format(trade_id=trade_id, user_id=user_id, investment_id=None)

    assert data["trade_id"] == str(trade_id)
    assert data["user_id"] == str(user_id)
    assert data["investment_id"] is None


def test_sweep_summary_stays_structured():
    summary = {
        "processed_count": 2,
        "errors": [],
        "total_credited": Decimal("1100.50000000"),
    }

    data = _format("Settlement sweep", sweep=summary)

    assert data["sweep"] == {"processed_count": 2, "errors": [], "total_credited": "1100.50000000"}


def test_job_scope_tags_records_and_resets():
    with job_scope("settlement_sweep") as run_id:
        data = _format("Settlement sweep")
        assert job_context.get() == "settlement_sweep"

    assert data["job"] == "settlement_sweep"
    assert data["trace_id"] == run_id
    assert job_context.get() is None
    assert trace_id_context.get() is None


def test_job_scope_keeps_enclosing_trace_id():
    token = trace_id_context.set("req-123")
    try:
        with job_scope("settlement_sweep") as run_id:
            assert run_id == "req-123"
        assert trace_id_context.get() == "req-123"
    finally:
        trace_id_context.reset(token)


def test_exception_is_formatted():
    try:
        raise RuntimeError("ledger unavailable")
    except RuntimeError:
        data = _format("Settlement failed", exc_info=sys.exc_info())

    assert "RuntimeError: ledger unavailable" in data["exception"]
