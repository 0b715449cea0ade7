"""
Database engine and session factory.

PostgreSQL (asyncpg) is the production store. SQLite (aiosqlite) is
supported for local runs and tests; there every transaction is opened with
BEGIN IMMEDIATE so concurrent writers serialize on the database lock.
"""

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fuel_ledger.config.settings import settings


def configure_sqlite(engine: AsyncEngine) -> None:
    """
    Take over transaction control from pysqlite.

    Args:
        engine: SQLite async engine
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine(
    url: str | None = None, echo: bool | None = None, **engine_kwargs: Any
) -> AsyncEngine:
    """
    Create the async engine for the ledger store.

    Args:
        url: Database URL (defaults to settings)
        echo: Log SQL statements (defaults to settings)
        **engine_kwargs: Extra create_async_engine options (e.g. poolclass)

    Returns:
        Configured async engine
    """
    url = url or settings.database_url
    engine = create_async_engine(
        url,
        echo=settings.database_echo if echo is None else echo,
        pool_pre_ping=not url.startswith("sqlite"),
        **engine_kwargs,
    )
    if engine.dialect.name == "sqlite":
        configure_sqlite(engine)
    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to the engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async_engine = create_engine()
async_session_maker = create_session_maker(async_engine)
