"""Async SQLAlchemy database engine and session management.

Provides the async database layer with:
- Connection pooling (configurable pool_size/max_overflow)
- Explicit construction at process start (no engine created at import)
- FastAPI dependency injection via get_session()
- Automatic session lifecycle (commit on success, rollback on error)
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from patterns.domain_config import DatabaseConfig

# ---------------------------------------------------------------------------
# Engine & session factory
# ---------------------------------------------------------------------------


def create_engine(config: DatabaseConfig) -> AsyncEngine:
    """Build the async engine. SQLite URLs skip pool sizing (no QueuePool)."""
    if config.url.startswith("sqlite"):
        if ":memory:" in config.url:
            # One shared connection, otherwise each checkout sees an empty database
            return create_async_engine(config.url, echo=config.echo, poolclass=StaticPool)
        return create_async_engine(config.url, echo=config.echo)

    return create_async_engine(
        config.url,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        echo=config.echo,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------

async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session with automatic commit/rollback.

    The session factory is created in the app lifespan and stored on
    ``app.state.session_factory``::

        def get_rule_repository(session: AsyncSession = Depends(get_session)):
            return RuleRepository(session)
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Same commit/rollback lifecycle outside a request (seeding, tests)."""
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ---------------------------------------------------------------------------
# Lifecycle hooks
# ---------------------------------------------------------------------------

async def init_db(engine: AsyncEngine) -> None:
    """Initialize database tables from models (dev/test only)."""
    from core.models.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    """Dispose of the connection pool on shutdown."""
    await engine.dispose()
