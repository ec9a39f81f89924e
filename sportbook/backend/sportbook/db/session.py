from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from ..config import get_settings

settings = get_settings()

engine = create_engine(settings.database_url, future=True, echo=False)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
Base = declarative_base()

# serialization_failure, deadlock_detected, lock_not_available
_CONTENTION_PGCODES = {"40001", "40P01", "55P03"}


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Run a block as one unit of work and commit it.

    Falls back to a SAVEPOINT when the session already holds a transaction,
    then commits the enclosing one so the block's writes become visible.
    """
    if db.in_transaction():
        with db.begin_nested():
            yield db
        db.commit()
    else:
        with db.begin():
            yield db


def is_contention_error(exc: DBAPIError) -> bool:
    """True when the database refused a write because another transaction won."""
    if isinstance(exc, IntegrityError):
        return True
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) in _CONTENTION_PGCODES:
        return True
    return "database is locked" in str(orig or "")
