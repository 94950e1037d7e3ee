"""
Database Connection Management
Synchronous SQLAlchemy engine and session factory
Source: https://docs.sqlalchemy.org/en/20/orm/session_basics.html
Verified: 2025-12-18
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hbx_core.core.config import get_exchange_settings
from hbx_core.models.base import Base
from hbx_core.utils.logging import get_logger

logger = get_logger(__name__)


# Global engine instance
_engine: Optional[Engine] = None
_session_maker: Optional[sessionmaker[Session]] = None


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for `database_url`.

    In-memory SQLite engines share one connection so every session sees
    the same database.
    """
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def get_engine() -> Engine:
    """
    Get or create the global engine.

    Returns:
        Engine instance
    """
    global _engine

    if _engine is None:
        settings = get_exchange_settings()
        logger.info(f"Creating database engine: {settings.DATABASE_URL.split('@')[-1]}")
        _engine = create_db_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

    return _engine


def get_session_maker() -> sessionmaker[Session]:
    """
    Get or create the global session maker.

    Returns:
        Session maker bound to the global engine
    """
    global _session_maker

    if _session_maker is None:
        _session_maker = sessionmaker(
            get_engine(),
            expire_on_commit=False,
            autoflush=False,
        )

    return _session_maker


@contextmanager
def get_session() -> Iterator[Session]:
    """
    Session scope committing on success and rolling back on error.

    Example:
        >>> with get_session() as session:
        ...     profiles = HbxProfile.all(session)
    """
    session = get_session_maker()()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database session error: {e}")
        raise
    finally:
        session.close()


def init_db(engine: Optional[Engine] = None) -> None:
    """Create every table known to the models."""
    import hbx_core.models  # noqa: F401  registers all mappers

    Base.metadata.create_all(engine or get_engine())


def reset_engine(engine: Optional[Engine] = None) -> None:
    """Dispose the global engine, optionally installing `engine` in its place."""
    global _engine, _session_maker

    if _engine is not None and _engine is not engine:
        _engine.dispose()
    _engine = engine
    _session_maker = None


def check_db_connection() -> bool:
    """
    Check if database connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
