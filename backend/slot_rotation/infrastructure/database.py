"""Database Session Manager: async connection pool with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception, so a failed batch leaves no
      half-applied rows behind
    - Every SQLAlchemy exception leaves as StoreError (StoreConflictError for
      integrity violations) tagged with the rotation step that opened the session
    - PostgreSQL connections use pool_pre_ping for stale connection detection

Design Decisions:
    - No module-level singleton: the FastAPI lifespan stores the manager on
      app.state and the CLI builds its own, so every consumer receives it explicitly
    - SQLite URLs (local runs, tests) skip the pool sizing arguments their pool rejects
    - expire_on_commit=False: prevents lazy-load issues in async context
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

from slot_rotation.core.errors import StoreConflictError, StoreError

logger = logging.getLogger(__name__)

# Most specific first
_STORE_ERRORS: tuple[tuple[type[SQLAlchemyError], type[StoreError], str], ...] = (
    (IntegrityError, StoreConflictError, "Integrity constraint violated"),
    (OperationalError, StoreError, "Connection or operational error"),
    (DBAPIError, StoreError, "Database driver error"),
    (SQLAlchemyError, StoreError, "Database operation failed"),
)


def _to_store_error(exc: SQLAlchemyError, operation: str) -> StoreError:
    for source, target, message in _STORE_ERRORS:
        if isinstance(exc, source):
            return target(message, operation)
    return StoreError("Database operation failed", operation)


class DatabaseSessionManager:
    """Hands out short-lived sessions to the slot repository, lease and run log."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        if database_url.startswith("sqlite"):
            engine = create_async_engine(database_url)
        else:
            engine = create_async_engine(
                database_url,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                pool_recycle=3600,
            )
        self._bind(engine)

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> "DatabaseSessionManager":
        """Wrap an engine built elsewhere (tests, migrations)."""
        manager = cls.__new__(cls)
        manager._bind(engine)
        return manager

    def _bind(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(
        self, operation: str = "query",
    ) -> AsyncGenerator[AsyncSession, None]:
        """Session for one store step; rolls back and raises StoreError on failure."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = _to_store_error(e, operation)
            logger.error(
                f"Store {operation} failed: {e}",
                extra={"error_code": error.code},
            )
            raise error from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session("health_check") as db:
                await db.execute(text("SELECT 1"))
            return True
        except StoreError as e:
            logger.error(f"DB health check failed: {e.message}")
            return False

    async def close(self) -> None:
        await self.engine.dispose()
