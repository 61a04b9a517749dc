"""
Async SQLAlchemy engine and session factory.
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from database.models import Base

# Execution option marking a transaction that will write.
WRITE_OPTION = "writes"


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create the async engine; pool sizing only applies to server databases."""
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, echo=echo)
        _serialize_sqlite_writers(engine)
        return engine
    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=10,
        max_overflow=20,
        pool_recycle=3600,
    )


def _serialize_sqlite_writers(engine: AsyncEngine) -> None:
    # Writers take the write lock up front so a competing insert waits and then
    # hits the unique constraint, instead of failing with "database is locked".
    # Reads stay deferred and never queue behind a writer's lock.
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(WRITE_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN DEFERRED")


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create tables (and the username unique constraint) if missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
