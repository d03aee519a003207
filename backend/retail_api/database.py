"""
Online Retail API - Database Session Management
================================================

What:  Async SQLAlchemy engine ownership, session factory, and FastAPI dependency.
Why:   Centralizes all connection logic in one place so route handlers never
       touch the pool directly.
How:   A `Database` object owns the engine and its bounded connection pool.
       It is created once in the application lifespan, stored on `app.state`,
       and handed to each request as a fresh `AsyncSession` by `get_db_session`.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine at startup, sessions per request, disposal at shutdown.

Connection Pooling Strategy:
    pool_size:         Persistent connections for normal load
    max_overflow:      Temporary connections for traffic spikes
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (tests, local experiments) skip the sizing arguments because
    SQLAlchemy picks a non-queue pool for them that rejects those options.
"""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from retail_api.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Models register their tables on `Base.metadata`, which Alembic reads for
    autogenerate and `Database.create_all` uses for development bootstrap.
    """
    pass


class Database:
    """
    Process-scoped owner of the async engine and session factory.

    Lifecycle:
        1. Constructed at startup (lifespan) or by tests with their own URL
        2. `session()` hands out one AsyncSession per request
        3. `dispose()` closes every pooled connection at shutdown
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        self.url = url
        engine_kwargs = {"pool_pre_ping": pool_pre_ping, "echo": echo}
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)

        # expire_on_commit=False: returned ORM objects stay readable after
        # the service commits, without a second round trip
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def create_all(self) -> None:
        """Creates every registered table that does not exist yet."""
        # Registers the models on Base.metadata
        from retail_api.models import product  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Returns True when `SELECT 1` succeeds on a pooled connection."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Gracefully closes all connections in the pool."""
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """Returns the Database attached to the running application."""
    database: Optional[Database] = getattr(request.app.state, "db", None)
    if database is None:
        raise RuntimeError("Database is not initialized; application lifespan has not run")
    return database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the application's Database
        2. Yields it to the route handler
        3. On success: commits anything the handler left pending
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session, returning the connection to the pool

    Example usage in a route:
        @router.get("/products")
        async def list_products(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database = get_database(request)
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
