"""Async SQLAlchemy engine and session factory.

SQLAlchemy 2.0 async mode: create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

The Database object is built once in the app lifespan, kept on app.state and
disposed on shutdown. Route handlers never reach for a module global; they
receive a session through get_db().
"""

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from jobboard.db.models import Base


class Database:
    """Owns the engine (connection pool) and the session factory."""

    def __init__(self, url: str, echo: bool = False, **engine_kwargs):
        self.url = url
        kwargs: dict = {"echo": echo}
        # Pool sizing only applies to server databases; SQLite keeps its default pool.
        if make_url(url).get_backend_name() != "sqlite":
            kwargs.update(pool_size=5, max_overflow=15, pool_pre_ping=True)
        kwargs.update(engine_kwargs)
        self.engine: AsyncEngine = create_async_engine(url, **kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create every table that doesn't exist yet (dev/test bootstrap)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request, auto-closes."""
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
