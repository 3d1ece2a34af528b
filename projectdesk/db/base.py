"""Shared SQLAlchemy base and the lazily-connected store handle."""

import asyncio
import time

import structlog
from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from projectdesk.core.config import Settings
from projectdesk.core.exceptions import StoreUnavailableError

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    pass


def resolve_store_url(url: str, database_name: str) -> URL:
    """Parse ``url`` and fill in ``database_name`` when the URL names no database."""
    parsed = make_url(url)
    if not parsed.database and parsed.get_backend_name() != "sqlite":
        parsed = parsed.set(database=database_name)
    return parsed


class Database:
    """Connect-once handle to the users/projects store.

    ``connect()`` is idempotent and never raises: a failed or unconfigured
    connection leaves ``connected`` False so callers can take their degraded
    path. After a failure, further calls return False at once until
    ``retry_after_seconds`` have passed.
    """

    def __init__(
        self,
        url: str,
        database_name: str = "miniprogram",
        timeout_seconds: float = 10.0,
        retry_after_seconds: float = 5.0,
        echo: bool = False,
    ):
        self.url = url
        self.database_name = database_name
        self.timeout_seconds = timeout_seconds
        self.retry_after_seconds = retry_after_seconds
        self.echo = echo
        self._retry_at = 0.0
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            url=settings.database_url,
            database_name=settings.database_name,
            timeout_seconds=settings.store_timeout_seconds,
            retry_after_seconds=settings.store_retry_after_seconds,
            echo=settings.debug,
        )

    @property
    def connected(self) -> bool:
        return self._session_factory is not None

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Return the session factory.

        Raises StoreUnavailableError if ``connect()`` has not succeeded.
        """
        if self._session_factory is None:
            raise StoreUnavailableError("Store is not connected")
        return self._session_factory

    def _engine_options(self, url: URL) -> dict:
        options: dict = {"echo": self.echo, "pool_pre_ping": True}
        if url.get_backend_name() != "sqlite":
            options["pool_timeout"] = self.timeout_seconds
        if url.get_driver_name() == "asyncpg":
            options["connect_args"] = {
                "timeout": self.timeout_seconds,
                "command_timeout": self.timeout_seconds,
            }
        return options

    async def connect(self) -> bool:
        if self.connected:
            return True
        if not self.url:
            logger.warning("store_not_configured", database_name=self.database_name)
            return False

        async with self._lock:
            if self.connected:
                return True
            if time.monotonic() < self._retry_at:
                logger.debug("store_connect_backoff", retry_in=round(self._retry_at - time.monotonic(), 2))
                return False

            engine = None
            try:
                url = resolve_store_url(self.url, self.database_name)
                engine = create_async_engine(url, **self._engine_options(url))

                # Import models so metadata is populated before create_all
                import projectdesk.db.models  # noqa: F401

                async with asyncio.timeout(self.timeout_seconds):
                    async with engine.begin() as conn:
                        await conn.run_sync(Base.metadata.create_all)
                        await conn.execute(text("SELECT 1"))
            except (SQLAlchemyError, OSError, TimeoutError, ValueError) as exc:
                logger.error(
                    "store_connect_failed",
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                if engine is not None:
                    await engine.dispose()
                self._retry_at = time.monotonic() + self.retry_after_seconds
                return False

            self._engine = engine
            self._session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
            logger.info("store_connected", backend=url.get_backend_name(), database=url.database)
            return True

    async def ping(self) -> bool:
        if self._engine is None:
            return False
        try:
            async with asyncio.timeout(self.timeout_seconds):
                async with self._engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError, TimeoutError) as exc:
            logger.error("store_ping_failed", error=str(exc), error_type=type(exc).__name__)
            return False
        return True

    async def close(self) -> None:
        """Dispose of the engine and release all connections."""
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("store_closed")
        self._engine = None
        self._session_factory = None
        self._retry_at = 0.0
