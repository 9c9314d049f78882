"""
Blog Backend — Database Handle and Session Management
=======================================================

What:  The `Database` handle (async engine + session factory), the ORM
       `Base`, and the FastAPI session dependency.
How:   One `Database` is constructed by the application factory and stored on
       `app.state.database`. Each request receives its own session through
       `get_db_session`, which commits on success and rolls back on error.
Who:   main.py builds it; routes depend on `get_db_session`; tests build
       their own in-memory instance.

Storage:
    The default URL is an in-memory SQLite database. An in-memory database
    exists only as long as its connection, so the engine uses a StaticPool:
    every session in the process shares that one connection. SQLite keeps a
    single transaction per connection, so units of work on that shared
    connection run one at a time; otherwise a rollback in one request would
    also discard rows another request had written.

    `reset()` drops and recreates every table. It is run at startup and
    discards any existing data.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models share this metadata, which `Database.reset()` uses to drop
    and create the schema.
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ignores REFERENCES clauses unless this pragma is on per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


class Database:
    """
    Process-wide persistence handle.

    Owns the engine (and therefore the physical store) and hands out
    sessions. Constructed explicitly and passed to whoever needs it.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        options = {}
        if self.is_ephemeral:
            options["poolclass"] = StaticPool

        self.engine: AsyncEngine = create_async_engine(url, echo=echo, **options)

        # Held for a whole unit of work when every session shares one connection
        self._shared_connection_lock: Optional[asyncio.Lock] = (
            asyncio.Lock() if self.is_ephemeral else None
        )

        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # expire_on_commit=False: response models are built from ORM objects
        # after the request session has committed
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def is_ephemeral(self) -> bool:
        """True for an in-memory SQLite store, which lives only as long as its connection."""
        return self.url.startswith("sqlite") and ":memory:" in self.url

    async def reset(self) -> None:
        """
        Drop every table and create the schema again, empty.

        Destructive: only appropriate for the ephemeral in-memory store.
        """
        # Models register themselves on Base.metadata when imported
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database synced!")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Unit of work: commit on success, roll back on any error, always close.

        On the shared in-memory connection the whole unit of work holds the
        lock, so a concurrent request never sees (or loses) uncommitted rows.
        """
        if self._shared_connection_lock is None:
            async with self._unit_of_work() as session:
                yield session
            return

        async with self._shared_connection_lock:
            async with self._unit_of_work() as session:
                yield session

    @asynccontextmanager
    async def _unit_of_work(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def ping(self) -> bool:
        """Runs SELECT 1; False if the store is unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False
        return True

    async def dispose(self) -> None:
        """Closes all pooled connections (and with them an in-memory store)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The session comes from the `Database` attached to the running
    application, so tests can swap in their own store by building the app
    with `create_app(database=...)`.

    Example usage in a route:
        @router.put("/users/{user_id}")
        async def update_user(user_id: int, db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
