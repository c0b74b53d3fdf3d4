"""Database Session Manager — async connection pool with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - All SQLAlchemy exceptions mapped to DatabaseError (core/errors.py); the most
      specific class wins because _ERROR_MAP is checked in order, anything else
      is reported as an unknown failure
    - Non-SQLAlchemy exceptions (domain errors raised inside a session) still roll
      back and propagate unchanged

Design Decisions:
    - One manager per app, built in the lifespan and held on app.state.db
    - expire_on_commit=False: ORM rows are read after commit when building ProjectState
    - Long-lived services (store adapters, websocket dispatcher) open one session
      per operation through session(), never hold a request session
    - SQLite URLs skip pool sizing: aiosqlite uses its own pool class
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from pixelcanvas.config import Settings
from pixelcanvas.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# (exception class, user-facing message, operation tag)
_ERROR_MAP: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Integrity constraint violated", "commit"),
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
)


def _to_domain_error(error: SQLAlchemyError) -> DatabaseError:
    for error_class, message, operation in _ERROR_MAP:
        if isinstance(error, error_class):
            return DatabaseError(message, operation)
    return DatabaseError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(
        cls, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ) -> "DatabaseSessionManager":
        engine_kwargs = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        return cls(create_async_engine(database_url, **engine_kwargs))

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseSessionManager":
        return cls.from_url(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = _to_domain_error(e)
            logger.error(
                f"DB {type(e).__name__} during {error.operation}: {e}",
                extra={"error_code": error.code},
            )
            raise error
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except DatabaseError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
