import asyncio
import logging
from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy import event, make_url, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import AsyncAdaptedQueuePool, StaticPool

from config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def is_memory_sqlite(database_url: str) -> bool:
    """True for in-memory SQLite URLs, which must share one connection to see one database."""
    url = make_url(database_url)
    return url.database in (None, "", ":memory:") or url.query.get("mode") == "memory"


def _get_engine_kwargs(settings: Settings) -> dict:
    """Return dialect-specific engine options for SQLite vs pooled servers."""
    kwargs = {"echo": settings.debug}
    if settings.is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        if is_memory_sqlite(settings.database_url):
            kwargs["poolclass"] = StaticPool
            return kwargs
        # File databases get one connection per session, like any other dialect
        kwargs["poolclass"] = AsyncAdaptedQueuePool
    else:
        kwargs["pool_pre_ping"] = True
    kwargs["pool_size"] = settings.db_pool_size
    kwargs["pool_timeout"] = settings.db_pool_timeout
    return kwargs


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Process-scoped storage handle: one engine plus its session factory.
    Built at startup, handed to request handlers via app.state, disposed on shutdown.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: AsyncEngine = create_async_engine(
            settings.database_url,
            **_get_engine_kwargs(settings),
        )
        if settings.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.sessionmaker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def init(self, retries: int | None = None, delay: float | None = None) -> None:
        """Connect with bounded retry, then create tables."""
        retries = retries if retries is not None else self.settings.db_connect_retries
        delay = delay if delay is not None else self.settings.db_connect_retry_delay
        for attempt in range(1, retries + 1):
            try:
                logger.info("Connecting to database (attempt %d/%d)", attempt, retries)
                async with self.engine.begin() as conn:
                    await conn.execute(text("SELECT 1"))
                    await conn.run_sync(Base.metadata.create_all)
                logger.info("Database ready")
                return
            except Exception as e:
                logger.error("Database connection attempt %d failed: %s", attempt, e)
                if attempt == retries:
                    raise
                await asyncio.sleep(delay)

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.exception("Database ping failed")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    One session (one pooled connection) per request. Write paths open their own
    transaction on it; the session is always closed on the way out.
    """
    database: Database = request.app.state.db
    async with database.sessionmaker() as session:
        yield session
