#!/usr/bin/env python3
"""
Investment settlement sweep runner

The API process already runs the sweep hourly (SCHEDULER_ENABLED=true).
This script runs one sweep out of process: from cron when the in-process
scheduler is disabled, or manually to replay a past instant.

Usage:
    # Settle everything due now
    python -m scripts.run_settlement_sweep

    # Settle everything that was due at a given instant (UTC)
    python -m scripts.run_settlement_sweep --as-of 2026-10-01T00:00:00

    # Smaller batch
    python -m scripts.run_settlement_sweep --max-items 200
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from typing import Optional

from elitestock.infrastructure.database import SessionLocal
from elitestock.infrastructure.logging_config import job_scope, setup_logging
from elitestock.infrastructure.settings import get_settings
from elitestock.services.settlement_service import run_settlement_sweep

JOB_NAME = "investment_settlement_sweep"


def parse_as_of(as_of_str: Optional[str]) -> datetime:
    """
    Parse --as-of (ISO 8601 date or datetime) or default to now UTC.

    Naive values are taken as UTC.
    """
    if not as_of_str:
        return datetime.now(timezone.utc)
    try:
        as_of = datetime.fromisoformat(as_of_str)
    except ValueError:
        raise ValueError(f"Invalid --as-of value: {as_of_str}. Expected ISO 8601, e.g. 2026-10-01T00:00:00")
    if as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=timezone.utc)
    return as_of


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Run the investment settlement sweep once',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        '--as-of',
        type=str,
        default=None,
        help='Settle investments with end_date <= this instant (ISO 8601, default: now UTC)'
    )
    parser.add_argument(
        '--max-items',
        type=int,
        default=None,
        help='Maximum investments to settle in one run (default: SETTLEMENT_MAX_ITEMS)'
    )
    return parser


def main(argv=None) -> int:
    """Main entry point for the job runner. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    try:
        as_of = parse_as_of(args.as_of)
    except ValueError as e:
        print(json.dumps({"job": JOB_NAME, "error": str(e), "exit_code": 1}), file=sys.stderr)
        return 1

    max_items = args.max_items or settings.SETTLEMENT_MAX_ITEMS

    try:
        with job_scope(JOB_NAME):
            result = run_settlement_sweep(
                session_factory=SessionLocal,
                now=as_of,
                max_items=max_items,
            )
    except Exception as e:
        print(json.dumps({
            "job": JOB_NAME,
            "as_of": as_of.isoformat(),
            "error": f"Unexpected error: {type(e).__name__}: {str(e)}",
            "exit_code": 1,
        }), file=sys.stderr)
        return 1

    output = {
        "job": JOB_NAME,
        "as_of": as_of.isoformat(),
        "max_items": max_items,
        "summary": result.to_dict(),
        "exit_code": 0 if not result.errors else 1,
    }
    # One JSON line on stdout
    print(json.dumps(output))
    return output["exit_code"]


if __name__ == "__main__":
    sys.exit(main())
