"""
Integration tests for balance reconciliation.

Tests cover:
- Consistent balances
- Drift detection and correction with an audit row
- Full runs over every active balance
"""

import pytest
from sqlalchemy import update

from fuel_ledger.models import UserBalance
from fuel_ledger.repositories.balance_correction_repository import (
    BalanceCorrectionRepository,
)
from fuel_ledger.services.rewards import BalanceReconciler


async def corrupt(session_maker, user_id, **pools):
    async with session_maker() as session:
        await session.execute(
            update(UserBalance).where(UserBalance.user_id == user_id).values(**pools)
        )
        await session.commit()


class TestReconciliation:
    """Test BalanceReconciler."""

    @pytest.mark.asyncio
    async def test_consistent_balance_untouched(self, run_service, session_maker, clock):
        await run_service("award", "alice", "github_star")
        await run_service("spend", "alice", "cv_builder")

        async with session_maker() as session:
            corrections = await BalanceReconciler(session, clock).reconcile_user("alice")

        assert corrections == []

    @pytest.mark.asyncio
    async def test_drift_corrected_from_log(
        self, run_service, session_maker, clock, ledger_state
    ):
        await run_service("award", "alice", "github_star")
        await corrupt(session_maker, "alice", permanent_pool=175)

        async with session_maker() as session:
            corrections = await BalanceReconciler(session, clock).reconcile_user("alice")

        assert len(corrections) == 1
        assert corrections[0].pool == "permanent"
        assert corrections[0].cached_before == 175
        assert corrections[0].ledger_sum == 100
        assert corrections[0].delta == -75

        state = await ledger_state("alice")
        assert state.permanent == 100
        assert state.consistent
        async with session_maker() as session:
            rows = await BalanceCorrectionRepository(session).get_by_user("alice")
        assert len(rows) == 1

    @pytest.mark.asyncio
    async def test_reconcile_all(self, run_service, session_maker, clock, ledger_state):
        for user_id in ("alice", "bob", "carol"):
            await run_service("award", user_id, "discord_join")
        await run_service("deactivate", "carol")
        await corrupt(session_maker, "bob", ephemeral_pool=3, permanent_pool=0)

        async with session_maker() as session:
            report = await BalanceReconciler(session, clock).reconcile_all(batch_size=1)

        assert report.checked == 2
        assert report.corrected == 1
        assert report.failed == []
        state = await ledger_state("bob")
        assert state.ephemeral == 0
        assert state.permanent == 50
