"""
Student Records — Database Handle and Session Management
==========================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI session dependency.
How:   A `Database` object owns one async engine (connection pool) and a
       session factory. The app factory constructs it once and attaches it to
       `app.state.database`; the `get_db_session` dependency reads it from
       the application serving the request and yields one session per request.
Who:   Constructed by `create_app()`; used by route handlers via Depends().
When:  Engine is created with the app; sessions are created per request;
       the engine is disposed during application shutdown.

Connection Pooling:
    pool_size / max_overflow come from settings for server databases.
    SQLite URLs get SQLAlchemy's default pool for the dialect, since the
    QueuePool sizing arguments do not apply to it.
"""

import logging
from typing import Any, AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from student_records.config import Settings

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Models inherit from this class to register with a shared metadata
    object, which Alembic and `Database.create_tables()` both read.
    """
    pass


class Database:
    """
    Process-wide handle to the student store.

    Attributes:
        engine:           Async engine managing the connection pool
        session_factory:  Creates AsyncSession instances bound to the engine
    """

    def __init__(self, url: str, **engine_kwargs: Any):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        # expire_on_commit=False: attributes stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build a Database using the pool configuration from settings."""
        engine_kwargs: dict = {
            "pool_pre_ping": settings.db_pool_pre_ping,
            "echo": settings.log_level == "DEBUG",
        }
        if not settings.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_recycle=3600,
            )
        return cls(settings.database_url, **engine_kwargs)

    @property
    def safe_url(self) -> str:
        """Connection URL with the password masked, for logging."""
        return make_url(self.url).render_as_string(hide_password=True)

    async def create_tables(self) -> None:
        """
        Create every table registered on Base.metadata if it is missing.

        Importing the models module registers the `students` table.
        """
        from student_records.models import student  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def ping(self) -> None:
        """Execute SELECT 1; raises if the store is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Looks up the Database attached to the serving application
        2. Yields a new session to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the exception handlers
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/students/{student_id}")
        async def get_student(student_id: int, db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
