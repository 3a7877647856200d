"""
Async engine and session factory.

Isolation discipline
====================

Bookings and cancellations must behave, per schedule, as if they ran one at a
time. How that is achieved depends on the backend:

  PostgreSQL:
    The engine is pinned to DB_ISOLATION_LEVEL (READ COMMITTED by default).
    The booking path locks the schedule row with SELECT ... FOR UPDATE, so two
    writers on the same schedule queue on that row lock while writers on other
    schedules run in parallel. The conditional UPDATE in the inventory store
    and the CHECK constraints are the backstop.

  SQLite:
    pysqlite/aiosqlite defer BEGIN until the first write, which lets two
    transactions both read "1 seat left" and then deadlock on the upgrade.
    We take over transaction control and open every transaction with
    BEGIN IMMEDIATE, acquiring the write lock up front; a second writer waits
    on the busy timeout instead of failing.
"""

from functools import lru_cache

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from rail_reservation.core.config import get_settings
from rail_reservation.core.logging import get_logger

logger = get_logger(__name__)


def _install_sqlite_hooks(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Stop the driver from emitting its own BEGIN; we emit it in _on_begin.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine_from_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """Build an engine for `database_url` with the isolation discipline above."""
    settings = get_settings()
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        engine = create_async_engine(
            url,
            echo=echo,
            connect_args={"timeout": settings.SQLITE_BUSY_TIMEOUT},
        )
        _install_sqlite_hooks(engine)
    else:
        engine = create_async_engine(
            url,
            echo=echo,
            isolation_level=settings.DB_ISOLATION_LEVEL,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=True,
        )

    logger.info("database_engine_created", backend=url.get_backend_name())
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Objects stay readable after commit; bookings are returned to callers
    # after their unit of work has closed.
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@lru_cache()
def get_engine() -> AsyncEngine:
    settings = get_settings()
    return create_engine_from_url(settings.DATABASE_URL, echo=settings.DEBUG)


@lru_cache()
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Application-wide session factory; FastAPI routes receive it as a dependency."""
    return create_session_factory(get_engine())


async def dispose_engine() -> None:
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
        get_engine.cache_clear()
        get_session_factory.cache_clear()
