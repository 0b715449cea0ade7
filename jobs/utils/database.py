"""Database access for background tasks."""

from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import NullPool

from fuel_ledger.config.database import create_engine, create_session_maker


def create_task_engine() -> AsyncEngine:
    """Create an engine without pooling, bound to nothing until first use."""
    return create_engine(echo=False, poolclass=NullPool)


@asynccontextmanager
async def task_session():
    """
    Open a session on a short-lived engine owned by the current task.

    Usage:
        async with task_session() as session:
            await session.execute(...)

    Yields:
        AsyncSession bound to the current event loop
    """
    engine = create_task_engine()
    session_maker = create_session_maker(engine)
    try:
        async with session_maker() as session:
            yield session
    finally:
        await engine.dispose()
