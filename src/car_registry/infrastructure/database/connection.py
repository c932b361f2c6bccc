"""Database connection management."""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .models import Base
from ..logging import get_logger


logger = get_logger(__name__)


class DatabaseManager:
    """Database connection manager.

    Owns the async engine and its connection pool. Every call to
    :meth:`get_session` checks out exactly one pooled connection, applies the
    per-session options and returns the connection when the block exits,
    whether it exits normally or by raising.
    """

    def __init__(
        self,
        database_url: str,
        sql_mode: Optional[str] = "TRADITIONAL",
        time_zone: Optional[str] = "-8:00",
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_pre_ping: bool = True,
        echo: bool = False
    ):
        """Initialize database manager."""
        # Convert mysql:// to mysql+aiomysql:// for async support
        if database_url.startswith("mysql://"):
            database_url = database_url.replace("mysql://", "mysql+aiomysql://", 1)

        self._database_url = database_url
        self._sql_mode = sql_mode
        self._time_zone = time_zone
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._pool_pre_ping = pool_pre_ping
        self._echo = echo

        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    async def connect(self) -> None:
        """Connect to database."""
        engine_options: Dict[str, Any] = {
            "echo": self._echo,
            "pool_pre_ping": self._pool_pre_ping,
        }
        # SQLite picks its own pool class, which takes no sizing arguments
        if not self._database_url.startswith("sqlite"):
            engine_options["pool_size"] = self._pool_size
            engine_options["max_overflow"] = self._max_overflow

        self._engine = create_async_engine(self._database_url, **engine_options)

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(
            "Database engine created",
            extra={"dialect": self._engine.dialect.name, "pool": type(self._engine.pool).__name__}
        )

    async def disconnect(self) -> None:
        """Disconnect from database."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    async def create_tables(self) -> None:
        """Create all tables known to the model metadata."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get database session bound to one pooled connection."""
        if not self._session_factory:
            raise RuntimeError("Database not connected. Call connect() first.")

        async with self._session_factory() as session:
            try:
                await self._configure_session(session)
                yield session
                await session.commit()
            except Exception as exc:
                logger.warning(
                    "Rolling back database session",
                    extra={"error": str(exc), "error_type": type(exc).__name__}
                )
                await session.rollback()
                raise
            finally:
                await session.close()

    async def _configure_session(self, session: AsyncSession) -> None:
        """Check out the session's connection and apply session-level options."""
        connection = await session.connection()

        if connection.dialect.name != "mysql":
            return

        if self._sql_mode:
            await connection.execute(text("SET SESSION sql_mode = :sql_mode"), {"sql_mode": self._sql_mode})
        if self._time_zone:
            await connection.execute(text("SET time_zone = :time_zone"), {"time_zone": self._time_zone})

    @property
    def engine(self) -> AsyncEngine:
        """Get database engine."""
        if not self._engine:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._engine
