"""
Database configuration and session management.

Provides:
- Database engine creation with proper configuration
- SessionLocal factory for creating database sessions
- get_db() dependency for FastAPI request-scoped sessions
- Database initialization utilities
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from commandstack.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

if settings.is_production:
    settings.validate_production_config()


def _is_sqlite(url: str) -> bool:
    return "sqlite" in url.lower()


def _ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    database = make_url(url).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def _is_memory_sqlite(url: str) -> bool:
    return make_url(url).database in (None, "", ":memory:")


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Create the engine for ``url``.

    File-backed SQLite keeps SQLAlchemy's default pool so each session
    gets its own connection and transaction. An in-memory database only
    exists on one connection, so it is shared across threads instead.
    """
    if not _is_sqlite(url):
        return create_engine(
            url,
            pool_size=5,
            pool_recycle=3600,
            pool_pre_ping=True,
            echo=echo,
        )

    # Request handlers run on a thread pool
    options = {"connect_args": {"check_same_thread": False}, "echo": echo}
    if _is_memory_sqlite(url):
        options["poolclass"] = StaticPool
    return create_engine(url, **options)


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints in SQLite."""
    if isinstance(dbapi_conn, sqlite3.Connection):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_db_engine(settings.database_url, echo=settings.log_level == "DEBUG")


SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for request-scoped database sessions.

    Commits when the request handler returns, rolls back if it raises.

    Usage in FastAPI:
        @router.get("/tasks")
        def list_tasks(db: Session = Depends(get_db)):
            return TaskService(db).get_all_tasks()

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside FastAPI.

    Usage for scripts or background jobs:
        with get_db_context() as db:
            CalendarSyncService(db).pull(user)

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """
    Initialize database by creating all tables.

    Useful for development and testing. In production, use Alembic migrations.
    """
    from commandstack.models.base import Base
    import commandstack.models  # noqa: F401  registers every table on Base.metadata

    if _is_sqlite(settings.database_url):
        _ensure_sqlite_directory(settings.database_url)

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")


def check_connection() -> bool:
    """
    Test database connection.

    Returns:
        bool: True if connection successful, False otherwise
    """
    try:
        with get_db_context() as db:
            db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
