"""
Domain events - In-process publish/subscribe, fired after a unit of work commits
"""

import enum
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(str, enum.Enum):
    TRADE_EXECUTED = "trade.executed"
    INVESTMENT_OPENED = "investment.opened"
    INVESTMENT_MATURED = "investment.matured"
    TRANSACTION_REVIEWED = "transaction.reviewed"


@dataclass(frozen=True)
class DomainEvent:
    type: EventType
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Subscriber = Callable[[DomainEvent], None]


class EventBus:
    """
    Synchronous in-process event bus.

    Events are published only after the money movement has committed, so a
    subscriber can never roll one back. A failing subscriber is logged and
    the remaining subscribers still run.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[EventType, List[Subscriber]] = defaultdict(list)

    def subscribe(self, event_type: EventType, subscriber: Subscriber) -> None:
        if subscriber not in self._subscribers[event_type]:
            self._subscribers[event_type].append(subscriber)

    def unsubscribe(self, event_type: EventType, subscriber: Subscriber) -> None:
        if subscriber in self._subscribers[event_type]:
            self._subscribers[event_type].remove(subscriber)

    def clear(self) -> None:
        self._subscribers.clear()

    def publish(self, event: DomainEvent) -> None:
        for subscriber in list(self._subscribers.get(event.type, ())):
            try:
                subscriber(event)
            except Exception as e:
                logger.error(
                    f"Event subscriber failed for {event.type.value}: {e}",
                    exc_info=True,
                    extra={"event_type": event.type.value},
                )


# Process-wide bus used when a caller does not pass its own
event_bus = EventBus()


def publish(events: Optional[EventBus], event_type: EventType, **payload: Any) -> None:
    """Publish on the given bus, or on the process-wide bus when None."""
    (events or event_bus).publish(DomainEvent(type=event_type, payload=payload))


def register_notification_subscribers(bus: EventBus, queue_name: str) -> None:
    """
    Forward domain events to the RQ notification queue.

    Each event becomes one job on `queue_name`; the worker renders and sends
    the email. Enqueue failures (Redis down) are logged by the bus.
    """
    from rq import Queue
    from elitestock.infrastructure.redis_client import get_redis
    from elitestock.workers import jobs

    handlers = {
        EventType.TRADE_EXECUTED: jobs.notify_trade_executed,
        EventType.INVESTMENT_OPENED: jobs.notify_investment_opened,
        EventType.INVESTMENT_MATURED: jobs.notify_investment_matured,
        EventType.TRANSACTION_REVIEWED: jobs.notify_transaction_reviewed,
    }

    def _make_subscriber(job_func):
        def _enqueue(event: DomainEvent) -> None:
            queue = Queue(queue_name, connection=get_redis())
            queue.enqueue(job_func, event.payload)
        _enqueue.__name__ = f"enqueue_{job_func.__name__}"
        return _enqueue

    for event_type, job_func in handlers.items():
        bus.subscribe(event_type, _make_subscriber(job_func))

    logger.info(f"Notification subscribers registered on queue '{queue_name}'")
