"""
Database configuration and session management
"""
import logging
from contextlib import contextmanager
from typing import Generator, Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from depin.core.config import get_settings
from depin.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

# Lazy initialization - don't create engine at module level
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None

# Base class for models (can be created immediately)
Base = declarative_base()


def get_engine() -> Engine:
    """Get or create database engine (lazy initialization)"""
    global _engine
    if _engine is None:
        settings = get_settings()

        if settings.is_sqlite:
            engine_kwargs = {
                "connect_args": {"check_same_thread": False, "timeout": 5},
            }
        else:
            engine_kwargs = {
                "pool_size": settings.database_pool_size,
                "max_overflow": settings.database_max_overflow,
                "pool_pre_ping": True,
                "connect_args": {
                    "connect_timeout": 5,
                    "options": "-c statement_timeout=5000",
                } if settings.database_url.startswith("postgresql") else {},
            }

        _engine = create_engine(
            settings.database_url,
            echo=settings.log_sqlalchemy,
            **engine_kwargs,
        )

        sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
        if not settings.log_sqlalchemy:
            sqlalchemy_logger.setLevel(logging.WARNING)
            sqlalchemy_logger.propagate = False

    return _engine


def get_session_local() -> sessionmaker:
    """Get or create session factory (lazy initialization)"""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all ledger tables (development convenience; production uses Alembic)"""
    import depin.models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database session
    """
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run a block as one all-or-nothing unit of work.

    Commits when the block completes and rolls back every pending change
    when it raises. The exception is re-raised unchanged.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def is_unique_violation(error: IntegrityError) -> bool:
    """Whether an IntegrityError was raised by a unique or primary key constraint"""
    orig = getattr(error, "orig", None)
    # PostgreSQL drivers expose the SQLSTATE; 23505 is unique_violation
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate:
        return sqlstate == "23505"
    message = str(orig if orig is not None else error).lower()
    return "unique constraint" in message or "duplicate" in message
