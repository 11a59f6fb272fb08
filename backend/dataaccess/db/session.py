"""
Async SQLAlchemy engine and session factory.

One ``AsyncSession`` per logical request: open it with ``session_scope()``
(or ``get_db()`` from a DI framework), hand it to the repositories, and
let the scope commit or roll back.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from dataaccess.core.config import Settings, settings
from dataaccess.core.logging import get_logger
from dataaccess.db.models import Base

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_from_settings(config: Settings = settings, **overrides) -> AsyncEngine:
    """Build the async engine; SQLite URLs get foreign keys switched on."""
    url = overrides.pop("url", config.DATABASE_URL)
    is_sqlite = url.startswith("sqlite")

    options: dict = {"echo": config.DB_ECHO}
    if not is_sqlite:
        options.update(
            pool_size=config.DB_POOL_SIZE,
            max_overflow=config.DB_MAX_OVERFLOW,
            pool_pre_ping=True,
        )
    options.update(overrides)

    engine = create_async_engine(url, **options)
    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = create_engine_from_settings()
async_session = make_session_factory(engine)


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create every table known to ``Base.metadata`` (no-op for existing ones)."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema initialized", tables=sorted(Base.metadata.tables))


async def drop_models(bind: AsyncEngine = engine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Database schema dropped")


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session; commit on success, roll back and re-raise on error."""
    async with (factory or async_session)() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields an async DB session."""
    async with session_scope() as session:
        yield session
