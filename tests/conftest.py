"""
Pytest configuration and fixtures

Runs against in-memory SQLite by default. Set TEST_DATABASE_URL to a
PostgreSQL URL to exercise real row locking (test_concurrency.py).
"""

import pytest
import os
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Set test environment variables before importing the app
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["NOTIFICATIONS_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "DEBUG"

from elitestock.infrastructure.database import Base, get_db
from elitestock.main import app
from elitestock.models import (
    Asset,
    AssetType,
    CopyRelationship,
    CopyStatus,
    InvestmentPlan,
    PlanStatus,
    Trader,
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
)
from elitestock.services.events import EventBus, EventType

IS_SQLITE = TEST_DATABASE_URL.startswith("sqlite")

# Create test database engine
if IS_SQLITE:
    # One shared in-memory connection for every session in a test
    test_engine = create_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
else:
    test_engine = create_engine(TEST_DATABASE_URL, pool_pre_ping=True, pool_size=10)

TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Create a fresh database session for each test.
    Drops and recreates all tables before and after each test.
    """
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)

    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def session_factory(db_session: Session):
    """Session factory bound to the test database (for the settlement sweep)"""
    return TestSessionLocal


@pytest.fixture
def client(db_session: Session):
    """
    Create FastAPI test client with the database dependency overridden.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class RecordingBus(EventBus):
    """EventBus that keeps every published event"""

    def __init__(self):
        super().__init__()
        self.published = []

    def publish(self, event):
        self.published.append(event)
        super().publish(event)

    def of_type(self, event_type: EventType):
        return [e for e in self.published if e.type == event_type]


@pytest.fixture
def events() -> RecordingBus:
    return RecordingBus()


@pytest.fixture
def make_user(db_session: Session):
    """Factory: create a user with a starting balance"""
    def _make_user(balance="0", email=None, suspended=False) -> User:
        user = User(
            id=uuid4(),
            email=email or f"user-{uuid4().hex[:8]}@example.com",
            full_name="Test User",
            balance=Decimal(balance),
            suspended=suspended,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def asset(db_session: Session) -> Asset:
    asset = Asset(
        id=uuid4(),
        symbol="AAPL",
        name="Apple Inc.",
        type=AssetType.STOCK,
        price=Decimal("50"),
        is_active=True,
    )
    db_session.add(asset)
    db_session.commit()
    db_session.refresh(asset)
    return asset


@pytest.fixture
def make_plan(db_session: Session):
    """Factory: create an investment plan"""
    def _make_plan(
        min_amount="100",
        max_amount=None,
        roi_percentage="10",
        lock_period_days=30,
        status=PlanStatus.ACTIVE,
        name="Growth 30",
    ) -> InvestmentPlan:
        plan = InvestmentPlan(
            id=uuid4(),
            name=name,
            min_amount=Decimal(min_amount),
            max_amount=Decimal(max_amount) if max_amount is not None else None,
            roi_percentage=Decimal(roi_percentage),
            lock_period_days=lock_period_days,
            features=["Daily reports"],
            status=status,
        )
        db_session.add(plan)
        db_session.commit()
        db_session.refresh(plan)
        return plan
    return _make_plan


@pytest.fixture
def make_trader(db_session: Session):
    """Factory: give a user a trader profile"""
    def _make_trader(user: User) -> Trader:
        trader = Trader(id=uuid4(), user_id=user.id, followers=0)
        db_session.add(trader)
        db_session.commit()
        db_session.refresh(trader)
        return trader
    return _make_trader


@pytest.fixture
def make_follow(db_session: Session):
    """Factory: insert a copy relationship directly"""
    def _make_follow(follower: User, trader: Trader, allocation="100", status=CopyStatus.ACTIVE) -> CopyRelationship:
        rel = CopyRelationship(
            id=uuid4(),
            follower_id=follower.id,
            trader_id=trader.id,
            allocation_percentage=Decimal(allocation),
            status=status,
        )
        db_session.add(rel)
        db_session.commit()
        db_session.refresh(rel)
        return rel
    return _make_follow


@pytest.fixture
def make_pending_transaction(db_session: Session):
    """Factory: insert a PENDING deposit / withdrawal without the request-time balance check"""
    def _make(user: User, transaction_type=TransactionType.DEPOSIT, amount="100") -> Transaction:
        transaction = Transaction(
            id=uuid4(),
            user_id=user.id,
            type=transaction_type,
            amount=Decimal(amount),
            status=TransactionStatus.PENDING,
            method="bank_transfer",
        )
        db_session.add(transaction)
        db_session.commit()
        db_session.refresh(transaction)
        return transaction
    return _make
