"""
Structured logging configuration

One JSON object per line. Besides the standard fields every record carries
the request trace_id (HTTP) or the job name and run id (scheduler, scripts),
so a settlement sweep can be followed across its per-investment lines.
"""

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterator, Optional

# Per-request trace id, or the run id of a background job
trace_id_context: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)
# Name of the background job currently running in this context
job_context: ContextVar[Optional[str]] = ContextVar("job", default=None)

_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "created", "filename", "funcName", "levelname",
    "levelno", "lineno", "module", "msecs", "message", "pathname", "process",
    "processName", "relativeCreated", "thread", "threadName", "taskName",
    "exc_info", "exc_text", "stack_info", "trace_id", "job",
))

# Entity ids are always emitted as plain strings, whatever the caller passed
DOMAIN_ID_FIELDS = ("user_id", "trade_id", "investment_id", "transaction_id", "plan_id", "copied_from_trade_id")


def _to_json_value(value: Any) -> Any:
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json_value(v) for v in value]
    return value


@contextmanager
def job_scope(job_name: str) -> Iterator[str]:
    """
    Tag every log line emitted inside the block with the job name and a run id.

    An enclosing trace id (e.g. a sweep triggered from an HTTP request) is kept.
    """
    run_id = trace_id_context.get() or str(uuid.uuid4())
    job_token = job_context.set(job_name)
    trace_token = trace_id_context.set(run_id)
    try:
        yield run_id
    finally:
        trace_id_context.reset(trace_token)
        job_context.reset(job_token)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logs"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        trace_id = trace_id_context.get() or getattr(record, "trace_id", None)
        if trace_id:
            log_data["trace_id"] = trace_id

        job = job_context.get() or getattr(record, "job", None)
        if job:
            log_data["job"] = job

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extra fields (logger.info(..., extra={...}))
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            if key in DOMAIN_ID_FIELDS and value is not None:
                log_data[key] = str(value)
            else:
                log_data[key] = _to_json_value(value)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = "INFO") -> None:
    """Setup structured logging"""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # The app module and the job runners may both call this
    if any(isinstance(h.formatter, JSONFormatter) for h in root_logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)
