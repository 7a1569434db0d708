"""
Engine and session handling for the Podi Tracker database.

One engine per process, built lazily from the active Config (or pointed at
an explicit URL by the command-line tool). Service functions obtain sessions
through session_scope(); the test suite swaps get_session_factory() for an
in-memory factory.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, close_all_sessions, sessionmaker
from sqlalchemy.pool import StaticPool

from ..models.base import Base
from ..utils.config import get_config
from .exceptions import DatabaseError

logger = logging.getLogger(__name__)

CORE_TABLES = ("master_ingredients", "recipes", "recipe_ingredients", "orders")

T = TypeVar("T")

_engine: Optional[Engine] = None
_SessionFactory: Optional[sessionmaker] = None


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """
    Turn on foreign key enforcement for every SQLite connection.

    Recipe lines and order items rely on ON DELETE CASCADE.
    """
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return

    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_database_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Build an engine for the given URL, or for the configured database.

    Args:
        database_url: SQLAlchemy URL; None means Config.database_url
        echo: Log every SQL statement

    Returns:
        SQLAlchemy Engine
    """
    if database_url is None:
        config = get_config()
        config.ensure_directories()
        database_url = config.database_url

    logger.info(f"Opening database: {database_url}")

    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every session gets its own empty database
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, connect_args={"timeout": 30})

    return create_engine(database_url, echo=echo)


def init_database(engine: Optional[Engine] = None) -> None:
    """Create any missing tables. Existing tables and data are left alone."""
    if engine is None:
        engine = get_engine()

    # Importing the package registers every model on Base.metadata
    from .. import models  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("Database schema ready")


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine

    if _engine is None:
        _engine = create_database_engine()
    return _engine


def get_session_factory() -> sessionmaker:
    """Return the process-wide session factory."""
    global _SessionFactory

    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _SessionFactory


def get_session() -> Session:
    """New session from the current factory. The caller commits and closes it."""
    return get_session_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Run a block of work in one transaction.

    Commits when the block finishes, rolls back and re-raises if it raises,
    and closes the session either way.

    Example:
        with session_scope() as session:
            session.add(MasterIngredient(name="Turmeric", price_per_kg=150))
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def run_in_session(
    work: Callable[[Session], T], failure_message: str, session: Optional[Session] = None
) -> T:
    """
    Call work(session) inside the caller's session or a new session_scope().

    Service errors raised by work pass through unchanged.

    Raises:
        DatabaseError: If SQLAlchemy fails, with the original error attached
    """
    try:
        if session is not None:
            return work(session)
        with session_scope() as new_session:
            return work(new_session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"{failure_message}: {e}", e)


def configure_database(database_url: str, echo: bool = False) -> Engine:
    """Replace the process-wide engine with one bound to database_url."""
    global _engine, _SessionFactory

    close_connections()
    _engine = create_database_engine(database_url, echo=echo)
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)
    return _engine


def verify_database() -> bool:
    """True when the database answers and holds the core tables."""
    try:
        tables = set(inspect(get_engine()).get_table_names())
    except SQLAlchemyError as e:
        logger.error(f"Could not inspect database: {e}")
        return False
    return tables.issuperset(CORE_TABLES)


def close_connections() -> None:
    """Close open sessions and dispose of the engine."""
    global _engine, _SessionFactory

    if _SessionFactory is not None:
        close_all_sessions()
        _SessionFactory = None

    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.debug("Database engine disposed")


def initialize_app_database() -> None:
    """Open the configured database, creating the file and tables if needed."""
    config = get_config()

    if config.database_exists():
        logger.info(f"Using database: {config.database_url}")
    else:
        logger.info(f"Creating database at: {config.database_path}")

    init_database(get_engine())

    if not verify_database():
        logger.warning("Database is missing core tables after initialization")
