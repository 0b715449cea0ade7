"""
Shared fixtures for unit tests.

Unit tests never open a database: sessions are AsyncMock objects.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def execute_result():
    """
    Build a mocked ``session.execute`` result.

    Usage:
        mock_session.execute.return_value = execute_result(first=(3,))
    """

    def _build(first=None, rowcount: int = 0, scalar=None):
        result = MagicMock()
        result.first.return_value = first
        result.rowcount = rowcount
        result.scalar.return_value = scalar
        result.scalar_one_or_none.return_value = scalar
        return result

    return _build


@pytest.fixture
def sqlite_session(mock_session):
    """Mock session whose bind reports the SQLite dialect."""
    bind = MagicMock()
    bind.dialect.name = "sqlite"
    mock_session.get_bind = MagicMock(return_value=bind)
    return mock_session


@pytest.fixture
def ledger_mock():
    """LedgerCore stand-in for components that delegate to it."""
    ledger = AsyncMock()
    ledger.roll_window_period = AsyncMock(return_value=False)
    return ledger
