"""
Settlement scheduler - Periodic investment settlement and trade housekeeping

Runs inside the API process on an APScheduler BackgroundScheduler:
- settlement sweep: every SETTLEMENT_INTERVAL_SECONDS, first run
  SETTLEMENT_INITIAL_DELAY_SECONDS after start
- stale trade expiry: pending trades older than TRADE_PENDING_TTL_HOURS
- pending copy dispatch: follower copies left PENDING after a crash

The sweep is single-flight per process: run_once() returns None while
another sweep is still running.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from elitestock.infrastructure.logging_config import job_scope
from elitestock.infrastructure.settings import Settings, get_settings
from elitestock.services.events import EventBus
from elitestock.services.settlement_service import SweepResult, run_settlement_sweep
from elitestock.services.trade_engine import dispatch_pending_copy_trades, expire_stale_trades

logger = logging.getLogger(__name__)


class SettlementScheduler:
    """
    Usage:
        scheduler = SettlementScheduler(session_factory=SessionLocal)
        scheduler.start()
        scheduler.run_once()  # trigger a sweep immediately (blocking)
        scheduler.stop()
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        settings: Optional[Settings] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings()
        self._events = events
        self._sweep_lock = threading.Lock()
        self._scheduler: Optional[BackgroundScheduler] = None
        self.last_result: Optional[SweepResult] = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.is_running:
            logger.warning("Settlement scheduler already running.")
            return

        settings = self._settings
        first_run = datetime.now(timezone.utc) + timedelta(seconds=settings.SETTLEMENT_INITIAL_DELAY_SECONDS)

        self._scheduler = BackgroundScheduler(
            timezone="UTC",
            job_defaults={"coalesce": True, "max_instances": 1},
        )
        self._scheduler.add_job(
            self.run_once,
            IntervalTrigger(seconds=settings.SETTLEMENT_INTERVAL_SECONDS),
            id="settlement_sweep",
            name="Investment settlement sweep",
            next_run_time=first_run,
        )
        self._scheduler.add_job(
            self.expire_stale_trades,
            IntervalTrigger(seconds=settings.SETTLEMENT_INTERVAL_SECONDS),
            id="expire_stale_trades",
            name="Expire stale pending trades",
        )
        self._scheduler.add_job(
            self.dispatch_pending_copies,
            IntervalTrigger(seconds=settings.COPY_DISPATCH_INTERVAL_SECONDS),
            id="dispatch_pending_copies",
            name="Dispatch pending copy trades",
        )
        self._scheduler.start()
        logger.info(
            f"Settlement scheduler started with {len(self._scheduler.get_jobs())} jobs, "
            f"sweep every {settings.SETTLEMENT_INTERVAL_SECONDS}s, first run at {first_run.isoformat()}"
        )

    def stop(self) -> None:
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Settlement scheduler stopped.")

    def run_once(self, now: Optional[datetime] = None) -> Optional[SweepResult]:
        """Run one settlement sweep unless one is already in progress."""
        if not self._sweep_lock.acquire(blocking=False):
            logger.info("Settlement sweep already in progress, skipping run.")
            return None

        try:
            with job_scope("settlement_sweep"):
                result = run_settlement_sweep(
                    session_factory=self._session_factory,
                    now=now,
                    max_items=self._settings.SETTLEMENT_MAX_ITEMS,
                    events=self._events,
                )
            self.last_result = result
            return result
        except Exception as e:
            # Keep the scheduler thread alive; next interval retries
            logger.error(f"Settlement sweep failed: {e}", exc_info=True)
            return None
        finally:
            self._sweep_lock.release()

    def expire_stale_trades(self, now: Optional[datetime] = None) -> int:
        db = self._session_factory()
        try:
            with job_scope("expire_stale_trades"):
                return expire_stale_trades(
                    db=db,
                    older_than=timedelta(hours=self._settings.TRADE_PENDING_TTL_HOURS),
                    now=now,
                )
        except Exception as e:
            logger.error(f"Stale trade expiry failed: {e}", exc_info=True)
            return 0
        finally:
            db.close()

    def dispatch_pending_copies(self) -> Optional[dict]:
        db = self._session_factory()
        try:
            with job_scope("dispatch_pending_copies"):
                return dispatch_pending_copy_trades(
                    db=db,
                    limit=self._settings.COPY_DISPATCH_BATCH,
                    events=self._events,
                )
        except Exception as e:
            logger.error(f"Pending copy dispatch failed: {e}", exc_info=True)
            return None
        finally:
            db.close()
