# ABOUTME: Async engine setup for the SQLAlchemy storage backend
# ABOUTME: Creates aiosqlite engines with WAL and foreign keys enabled, plus async engines for other URLs

from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

# Async drivers substituted when a URL names only the backend.
ASYNC_DRIVERS = {"sqlite": "aiosqlite", "postgresql": "asyncpg"}


def async_url(url: str) -> URL:
    """Return ``url`` with an async driver, e.g. ``sqlite:///a.db`` -> ``sqlite+aiosqlite:///a.db``."""
    parsed = make_url(url)
    backend = parsed.get_backend_name()
    if "+" not in parsed.drivername and backend in ASYNC_DRIVERS:
        parsed = parsed.set(drivername=f"{backend}+{ASYNC_DRIVERS[backend]}")
    return parsed


def create_db_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for ``url``.

    Statements run on the event loop through the async driver, so no unit of
    work blocks other tasks while it waits on the database. SQLite gets
    foreign keys enabled and, for file databases, WAL mode. An in-memory
    SQLite database is kept on a single shared connection so that every unit
    of work sees the same database.
    """
    parsed = async_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_async_engine(parsed, echo=echo)

    in_memory = parsed.database in (None, "", ":memory:")
    if in_memory:
        engine = create_async_engine(parsed, echo=echo, poolclass=StaticPool)
    else:
        engine = create_async_engine(parsed, echo=echo)

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine
