"""Database configuration and session management for SQLite.

The engine is created once per process and shared by every request; each
request gets its own ``Session`` through :func:`get_session`.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: concurrent readers while a join or
      cancel is being written.

    - **Foreign Keys**: disabled by default in SQLite. Attendee rows carry a
      foreign key to their event, so with enforcement on, a join against a
      missing event fails inside the same INSERT that guards duplicates.

    - **check_same_thread=False**: FastAPI runs sync dependencies in a
      threadpool, so a connection may be used from another thread.
"""

import logging

from sqlalchemy import event as sa_event
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


def enable_sqlite_pragmas(target: Engine) -> None:
    """Register the per-connection pragmas on an engine."""

    @sa_event.listens_for(target, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        # Pragmas are connection-level, so they are set on every new
        # connection handed out by the pool.
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
        # SQLite's built-in lower() only folds ASCII letters.
        dbapi_connection.create_function(
            "lower", 1, _unicode_lower, deterministic=True
        )


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


enable_sqlite_pragmas(engine)


def create_db_and_tables(target: Engine = engine):
    """Create all database tables and check the database answers.

    Raises whatever the driver raises; the caller treats that as fatal.
    """
    SQLModel.metadata.create_all(target)
    with target.connect() as connection:
        connection.execute(text("SELECT 1"))
    logger.info("Database ready at %s", target.url.render_as_string(hide_password=True))


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
