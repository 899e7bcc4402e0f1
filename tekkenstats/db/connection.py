from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator
from urllib.parse import urlsplit

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tekkenstats.settings import POSTGRES_ASYNC_PREFIX, AppSettings, get_settings

logger = logging.getLogger(__name__)


def _validate_database_url(database_url: str) -> str:
    """Validate the resolved connection string before building an engine.

    Only two backends are supported: PostgreSQL through psycopg's async driver
    for deployments and SQLite through aiosqlite for local runs and tests.
    """

    normalized_url = database_url.strip()
    if not normalized_url:
        raise RuntimeError(
            "DATABASE_URL is set but empty. Provide a valid PostgreSQL connection string."
        )

    if normalized_url.startswith("sqlite+aiosqlite://"):
        return normalized_url

    if not normalized_url.startswith(POSTGRES_ASYNC_PREFIX):
        raise RuntimeError(
            "DATABASE_URL must use the PostgreSQL scheme. "
            "Expected a URL beginning with 'postgresql://', 'postgres://', or 'postgresql+psycopg://'."
        )

    parts = urlsplit(normalized_url)
    if not parts.hostname or not parts.path:
        raise RuntimeError(
            "DATABASE_URL appears malformed. Verify the host and database name are present."
        )

    return normalized_url


def get_database_url(active_settings: AppSettings | None = None) -> str:
    """Return the validated async database URL for the active settings."""

    candidate = active_settings or get_settings()
    return _validate_database_url(candidate.resolved_database_url)


def sanitize_database_url(url: str) -> str:
    """Hide the password portion of ``url`` so it can be logged."""
    if "://" not in url:
        return url

    scheme, rest = url.split("://", 1)
    if "@" in rest:
        auth, host_db = rest.split("@", 1)
        if ":" in auth:
            user, _ = auth.split(":", 1)
            return f"{scheme}://{user}:***@{host_db}"
        return f"{scheme}://{auth}@{host_db}"

    return url


def create_engine(active_settings: AppSettings | None = None) -> AsyncEngine:
    """Create the async SQLAlchemy engine for the configured backend.

    PostgreSQL connections get a warm pool; SQLite relies on the driver's
    defaults because pooling parameters are not accepted there.
    """

    candidate = active_settings or get_settings()
    url = get_database_url(candidate)

    if url.startswith(POSTGRES_ASYNC_PREFIX):
        engine = create_async_engine(
            url,
            future=True,
            echo=False,
            pool_size=10,  # Maintain 10 warm connections
            max_overflow=20,  # Allow up to 30 total connections
            pool_pre_ping=True,  # Validate connections before use
            pool_recycle=1800,  # Recycle connections every 30 min
            pool_timeout=30,
        )
    else:
        engine = create_async_engine(url, future=True, echo=False)

    from tekkenstats.monitoring import setup_query_monitoring

    setup_query_monitoring(
        engine,
        slow_query_threshold=candidate.slow_query_threshold,
    )
    logger.info(f"Database engine created for {sanitize_database_url(url)}")

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


# Global engine/session instances shared by scripts and services
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the global engine instance."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Lazily create a session factory bound to the shared engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


async def dispose_engine() -> None:
    """Dispose of the shared engine so scripts exit without dangling connections."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


@asynccontextmanager
async def get_session_context() -> AsyncIterator[AsyncSession]:
    """
    Async context manager for scripts/CLI tasks that need manual session control.

    Rolls back on error; committing is left to the caller.
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
