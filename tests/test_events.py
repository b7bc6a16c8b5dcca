"""
Tests for domain events and notification jobs
"""

import logging
import pytest

import elitestock.infrastructure.redis_client as redis_client
from elitestock.services.events import (
    DomainEvent,
    EventBus,
    EventType,
    publish,
    register_notification_subscribers,
)
from elitestock.workers import jobs


def test_subscribers_receive_published_events():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.TRADE_EXECUTED, received.append)

    publish(bus, EventType.TRADE_EXECUTED, trade_id="t-1")
    publish(bus, EventType.INVESTMENT_OPENED, investment_id="i-1")

    assert len(received) == 1
    assert received[0].payload == {"trade_id": "t-1"}
    assert received[0].occurred_at is not None


def test_failing_subscriber_does_not_stop_others(caplog):
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError("smtp down")

    bus.subscribe(EventType.INVESTMENT_MATURED, broken)
    bus.subscribe(EventType.INVESTMENT_MATURED, received.append)

    with caplog.at_level(logging.ERROR, logger="elitestock.services.events"):
        bus.publish(DomainEvent(type=EventType.INVESTMENT_MATURED, payload={}))

    assert len(received) == 1
    assert "Event subscriber failed" in caplog.text


def test_subscribe_is_idempotent_and_unsubscribe():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.TRADE_EXECUTED, received.append)
    bus.subscribe(EventType.TRADE_EXECUTED, received.append)

    publish(bus, EventType.TRADE_EXECUTED)
    assert len(received) == 1

    bus.unsubscribe(EventType.TRADE_EXECUTED, received.append)
    publish(bus, EventType.TRADE_EXECUTED)
    assert len(received) == 1


class FakeQueue:
    enqueued = []

    def __init__(self, name, connection=None):
        self.name = name

    def enqueue(self, func, *args):
        FakeQueue.enqueued.append((self.name, func, args))


def test_notification_subscribers_enqueue_jobs(monkeypatch):
    FakeQueue.enqueued = []
    monkeypatch.setattr("rq.Queue", FakeQueue)
    monkeypatch.setattr(redis_client, "get_redis", lambda: object())

    bus = EventBus()
    register_notification_subscribers(bus, "notifications")
    publish(bus, EventType.TRANSACTION_REVIEWED, transaction_id="tx-1", action="approve")

    assert len(FakeQueue.enqueued) == 1
    name, func, args = FakeQueue.enqueued[0]
    assert name == "notifications"
    assert func is jobs.notify_transaction_reviewed
    assert args == ({"transaction_id": "tx-1", "action": "approve"},)


def test_enqueue_failure_is_logged_not_raised(monkeypatch, caplog):
    class DownQueue(FakeQueue):
        def enqueue(self, func, *args):
            raise ConnectionError("redis unavailable")

    monkeypatch.setattr("rq.Queue", DownQueue)
    monkeypatch.setattr(redis_client, "get_redis", lambda: object())

    bus = EventBus()
    register_notification_subscribers(bus, "notifications")

    with caplog.at_level(logging.ERROR, logger="elitestock.services.events"):
        publish(bus, EventType.TRADE_EXECUTED, trade_id="t-1")

    assert "redis unavailable" in caplog.text


@pytest.mark.parametrize("job, payload", [
    (jobs.notify_trade_executed, {
        "email": "a@example.com", "trade_type": "buy", "amount": "2", "asset_symbol": "AAPL",
        "price": "50", "cost": "100", "copied_from_trade_id": None,
    }),
    (jobs.notify_investment_opened, {
        "email": "a@example.com", "plan_name": "Growth", "amount": "500",
        "roi_percentage": "10", "end_date": "2026-11-01T00:00:00+00:00",
    }),
    (jobs.notify_investment_matured, {
        "email": "a@example.com", "principal": "500", "profit": "50", "total_return": "550",
    }),
    (jobs.notify_transaction_reviewed, {
        "email": "a@example.com", "transaction_type": "withdrawal", "amount": "200",
        "action": "reject", "notes": "Address mismatch",
    }),
])
def test_notification_jobs_send_email(job, payload, caplog):
    with caplog.at_level(logging.INFO, logger="elitestock.workers.jobs"):
        job(payload)

    assert "Sending email to a@example.com" in caplog.text


def test_notification_without_recipient_is_dropped(caplog):
    with caplog.at_level(logging.WARNING, logger="elitestock.workers.jobs"):
        jobs.notify_investment_matured({"email": None, "principal": "1", "profit": "0", "total_return": "1"})

    assert "No recipient" in caplog.text
