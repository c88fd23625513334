"""
Engine and session factory for the car-rental store.

PostgreSQL (asyncpg) is the production target; SQLite (aiosqlite) serves
local runs and the test suite. SQLite only honours the ``ON DELETE CASCADE``
from ``user_cars`` to ``cars`` once ``PRAGMA foreign_keys`` is on for the
connection, so every SQLite engine built here switches it on.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)

from carrental.core.config import settings


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Enforce foreign keys on every new connection of a SQLite engine."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, _connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, **overrides: Any) -> AsyncEngine:
    if url.startswith("sqlite"):
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    else:
        options = {"pool_pre_ping": True, "pool_size": 20, "max_overflow": 10, "pool_recycle": 300}
    options.update(overrides)

    engine = create_async_engine(url, **options)
    if engine.dialect.name == "sqlite":
        enable_sqlite_foreign_keys(engine)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Rows stay readable after commit; handlers serialise them afterwards
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL)
async_session_factory = build_session_factory(engine)
