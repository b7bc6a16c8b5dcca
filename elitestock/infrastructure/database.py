"""
Database configuration - SQLAlchemy 2.x (sync)
"""

from contextlib import contextmanager
from typing import Iterator, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import create_engine, select
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from elitestock.infrastructure.settings import get_settings

settings = get_settings()


def _engine_kwargs(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models - SQLAlchemy 2.x style"""
    pass


ModelT = TypeVar("ModelT", bound=Base)


def get_db():
    """
    Dependency to get database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Run a block as one atomic unit: commit on success, rollback on any error.

    Row locks taken with lock_row() inside the block are held until the
    commit/rollback at exit, so a balance change and its Transaction row are
    written together or not at all.
    """
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise


def lock_row(
    db: Session,
    model: Type[ModelT],
    row_id: UUID,
    *criteria,
    skip_locked: bool = False,
) -> Optional[ModelT]:
    """
    SELECT ... FOR UPDATE a single row by primary key.

    Extra criteria are evaluated in the same locked statement, so a status
    filter (e.g. status == ACTIVE) is checked atomically with the lock.
    populate_existing() refreshes an already-loaded instance with the locked
    row's values instead of returning stale identity-map state.
    """
    stmt = (
        select(model)
        .where(model.id == row_id, *criteria)
        .with_for_update(skip_locked=skip_locked)
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalar_one_or_none()
