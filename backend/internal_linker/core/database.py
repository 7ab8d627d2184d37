"""Async engine setup and write transactions for the article store.

The engine is built lazily from Settings the first time a SQL-backed
store is requested. Writes go through transaction(), which commits on
success and is the single place a failed write is logged and rolled back.
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from internal_linker.core.config import Settings, get_settings
from internal_linker.core.logging import db_logger, get_logger

logger = get_logger(__name__)

# Used when no settings are available (e.g. a store built around a test engine)
DEFAULT_SLOW_QUERY_THRESHOLD_MS = 100

_ASYNC_DRIVER_SCHEMES = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
}


class Base(DeclarativeBase):
    """Declarative base for the article model."""


def to_async_url(url: str) -> str:
    """Point a plain PostgreSQL URL at the asyncpg driver.

    URLs that already name a driver are returned unchanged.
    """
    for scheme, async_scheme in _ASYNC_DRIVER_SCHEMES.items():
        if url.startswith(scheme):
            return async_scheme + url[len(scheme) :]
    return url


def engine_options(settings: Settings) -> dict[str, Any]:
    """Build create_async_engine keyword arguments from settings."""
    connect_args: dict[str, Any] = {
        "timeout": settings.db_connect_timeout,
        "command_timeout": settings.db_command_timeout,
    }
    if settings.environment == "production":
        connect_args["ssl"] = "require"

    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_pre_ping": True,
        "echo": settings.debug,
        "connect_args": connect_args,
    }


class DatabaseManager:
    """Owns the process-wide engine and its session factory."""

    def __init__(self) -> None:
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_initialized(self) -> bool:
        return self._session_factory is not None

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call init_db() first.")
        return self._session_factory

    def init_db(self, settings: Settings | None = None) -> None:
        """Create the engine and session factory.

        Connection failures are logged with the password masked and
        re-raised.
        """
        settings = settings or get_settings()
        url = to_async_url(str(settings.database_url))

        try:
            self._engine = create_async_engine(url, **engine_options(settings))
        except Exception as e:
            db_logger.connection_error(e, url)
            raise

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info(
            "Article database engine ready",
            extra={"pool_size": settings.db_pool_size},
        )

    async def close(self) -> None:
        """Dispose of the engine, if one was created."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Article database engine disposed")


db_manager = DatabaseManager()


@asynccontextmanager
async def transaction(
    session: AsyncSession,
    table: str | None = None,
    threshold_ms: float = DEFAULT_SLOW_QUERY_THRESHOLD_MS,
) -> AsyncGenerator[AsyncSession, None]:
    """Commit the work done in the block, or roll it back and log why.

    Usage:
        async with transaction(session, table="blog_posts"):
            await ArticleRepository(session).update_body(...)
    """
    started = time.monotonic()
    target = table or "unknown table"

    try:
        yield session
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        db_logger.transaction_failure(
            e, table=table, context=f"Write to {target} rolled back"
        )
        raise
    finally:
        elapsed_ms = (time.monotonic() - started) * 1000
        if elapsed_ms > threshold_ms:
            db_logger.slow_query(
                query=f"write transaction on {target}",
                duration_ms=elapsed_ms,
                table=table,
            )
