"""
Companies API: Database Engine & Session Factory
=================================================

What:  Async SQLAlchemy engine (the shared connection pool), session factory,
       declarative base, and lifecycle helpers.
How:   The engine owns the pool. Each request checks out its own AsyncSession
       from `async_session_factory` through the session adapter
       (see companies_api.middleware.session); handlers never touch the engine.
When:  Engine is created at module import; sessions are created per request.

Pool sizing comes from settings (DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_PRE_PING).
"""

import logging

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from companies_api.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite URLs skip the pool sizing arguments, which only apply to
    queue-based pools.
    """
    options = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(database_url, **options)


# ── Engine & Session Factory ──────────────────────────────────────────────
engine = build_engine(settings.database_url)

# expire_on_commit=False: inserted rows stay readable after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all ORM models; shares a single metadata object."""
    pass


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def verify_connection(target: AsyncEngine = engine) -> None:
    """
    Run `SELECT 1` against the database.

    Raises whatever the driver raises; the lifespan handler lets it propagate
    so the server refuses to start without a reachable database.
    """
    async with target.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def create_schema(target: AsyncEngine = engine) -> None:
    """Create all tables and indexes declared on `Base` that do not exist yet."""
    # Registers the models with Base.metadata
    from companies_api.models.company import Company  # noqa: F401

    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")


async def dispose_engine(target: AsyncEngine = engine) -> None:
    """Close all pooled connections. Called during application shutdown."""
    await target.dispose()
