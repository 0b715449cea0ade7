"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

# Minimal environment for the settings module; must run before any
# fuel_ledger import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./fuel_ledger_test.db")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("PROMO_CODES", '{"LAUNCH50": 50, "BETA10": 10}')

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from fuel_ledger.config.database import create_engine, create_session_maker  # noqa: E402
from fuel_ledger.models import Base  # noqa: E402
from fuel_ledger.services.rewards import RewardService  # noqa: E402


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)

    def set(self, now: datetime) -> None:
        self.now = now


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.flush = AsyncMock()
    return session


@pytest.fixture
def clock():
    """Clock fixed at midday UTC."""
    return FakeClock(datetime(2026, 10, 17, 12, 0, tzinfo=UTC))


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Async engine on a fresh SQLite file with the ledger schema."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    """Session factory bound to the test database."""
    return create_session_maker(engine)


@pytest_asyncio.fixture
async def session(session_maker):
    """Single session for inspecting state."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def run_service(session_maker, clock):
    """
    Run one RewardService call in its own session, like one request.

    Usage:
        result = await run_service("award", "alice", "github_star")
    """

    async def _run(method: str, *args, **kwargs):
        async with session_maker() as session:
            service = RewardService(session, clock=clock)
            return await getattr(service, method)(*args, **kwargs)

    return _run
