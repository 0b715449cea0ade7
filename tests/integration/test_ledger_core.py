"""
Integration tests for LedgerCore.

Tests cover:
- Credit and transaction log pairing
- Provisioning and soft-disable
- Debit order, daily refill and corrections
"""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select

from fuel_ledger.models import BalanceCorrection, CreditTransaction, FuelPool
from fuel_ledger.repositories.credit_transaction_repository import (
    CreditTransactionRepository,
)
from fuel_ledger.services.rewards import LedgerCore
from fuel_ledger.utils.exceptions import BalanceNotFoundError, InvalidAmountError


NOW = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)


@pytest.fixture
def ledger(session):
    """LedgerCore on the test session."""
    return LedgerCore(session)


async def ledger_sums(session, user_id):
    return await CreditTransactionRepository(session).sum_by_pool(user_id)


class TestProvisioning:
    """Test ensure_balance and deactivate."""

    @pytest.mark.asyncio
    async def test_provisions_empty_balance_with_code(self, ledger):
        balance = await ledger.ensure_balance("alice", NOW)

        assert balance.ephemeral_pool == 0
        assert balance.permanent_pool == 0
        assert balance.is_active is True
        assert len(balance.referral_code) == 8
        assert set(balance.referral_code) <= set("0123456789ABCDEF")

    @pytest.mark.asyncio
    async def test_existing_balance_returned(self, ledger):
        first = await ledger.ensure_balance("alice", NOW)
        second = await ledger.ensure_balance("alice", NOW)

        assert first.id == second.id
        assert first.referral_code == second.referral_code

    @pytest.mark.asyncio
    async def test_missing_balance_without_create(self, ledger):
        with pytest.raises(BalanceNotFoundError):
            await ledger.ensure_balance("ghost", NOW, create=False)

    @pytest.mark.asyncio
    async def test_disabled_balance_not_recreated(self, ledger):
        await ledger.ensure_balance("alice", NOW)
        await ledger.deactivate("alice", NOW)

        with pytest.raises(BalanceNotFoundError):
            await ledger.ensure_balance("alice", NOW)
        with pytest.raises(BalanceNotFoundError):
            await ledger.snapshot("alice")

    @pytest.mark.asyncio
    async def test_deactivate_unknown_user(self, ledger):
        with pytest.raises(BalanceNotFoundError):
            await ledger.deactivate("ghost", NOW)


class TestCredit:
    """Test credits."""

    @pytest.mark.asyncio
    async def test_credit_returns_both_pools_and_logs(self, ledger, session):
        await ledger.ensure_balance("alice", NOW)

        snapshot = await ledger.credit(
            "alice", FuelPool.PERMANENT, 100, "github_star", "Reward for github_star", NOW
        )

        assert snapshot.permanent == 100
        assert snapshot.ephemeral == 0
        records = (await session.execute(select(CreditTransaction))).scalars().all()
        assert len(records) == 1
        assert records[0].amount == 100
        assert records[0].pool == "permanent"
        assert records[0].action_type == "github_star"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -5])
    async def test_non_positive_amount_rejected(self, ledger, amount):
        await ledger.ensure_balance("alice", NOW)

        with pytest.raises(InvalidAmountError):
            await ledger.credit("alice", FuelPool.PERMANENT, amount, "x", "", NOW)

    @pytest.mark.asyncio
    async def test_credit_without_balance(self, ledger, session):
        with pytest.raises(BalanceNotFoundError):
            await ledger.credit("ghost", FuelPool.PERMANENT, 10, "x", "", NOW)

        assert await CreditTransactionRepository(session).count(user_id="ghost") == 0


class TestDebit:
    """Test spending and refills."""

    @pytest.mark.asyncio
    async def test_first_debit_refills_ephemeral(self, ledger, session):
        await ledger.ensure_balance("alice", NOW)

        result = await ledger.debit("alice", 10, "cv_builder", NOW)

        assert result.charged is True
        assert result.ephemeral_spent == 10
        assert result.balances.ephemeral == 10
        assert await ledger_sums(session, "alice") == {
            FuelPool.EPHEMERAL: 10,
            FuelPool.PERMANENT: 0,
        }

    @pytest.mark.asyncio
    async def test_ephemeral_spent_before_permanent(self, ledger, session):
        await ledger.ensure_balance("alice", NOW)
        await ledger.credit("alice", FuelPool.PERMANENT, 50, "github_star", "", NOW)

        result = await ledger.debit("alice", 25, "cv_builder", NOW)

        assert result.ephemeral_spent == 20
        assert result.permanent_spent == 5
        assert result.balances.ephemeral == 0
        assert result.balances.permanent == 45
        sums = await ledger_sums(session, "alice")
        assert sums[FuelPool.EPHEMERAL] == result.balances.ephemeral
        assert sums[FuelPool.PERMANENT] == result.balances.permanent

    @pytest.mark.asyncio
    async def test_insufficient_fuel_changes_nothing(self, ledger):
        await ledger.ensure_balance("alice", NOW)

        result = await ledger.debit("alice", 25, "cv_builder", NOW)

        assert result.charged is False
        assert result.available == 20
        assert (await ledger.snapshot("alice")).total == 20

    @pytest.mark.asyncio
    async def test_refill_once_per_day(self, ledger):
        await ledger.ensure_balance("alice", NOW)
        await ledger.debit("alice", 15, "ping", NOW)

        same_day = await ledger.refill_ephemeral("alice", NOW + timedelta(hours=3))
        next_day = await ledger.refill_ephemeral("alice", NOW + timedelta(days=1))

        assert same_day.ephemeral == 5
        assert next_day.ephemeral == 20

    @pytest.mark.asyncio
    async def test_debit_requires_positive_amount(self, ledger):
        with pytest.raises(InvalidAmountError):
            await ledger.debit("alice", 0, "cv_builder", NOW)


class TestCorrections:
    """Test apply_correction."""

    @pytest.mark.asyncio
    async def test_correction_overwrites_pool_and_audits(self, ledger, session):
        await ledger.ensure_balance("alice", NOW)
        await ledger.credit("alice", FuelPool.PERMANENT, 30, "x_follow", "", NOW)
        balance = await ledger.lock("alice")

        correction = await ledger.apply_correction(
            balance, FuelPool.PERMANENT, 25, reason="test drift", now=NOW
        )

        assert correction.cached_before == 30
        assert correction.ledger_sum == 25
        assert correction.delta == -5
        assert (await ledger.snapshot("alice")).permanent == 25
        rows = (await session.execute(select(BalanceCorrection))).scalars().all()
        assert len(rows) == 1

    @pytest.mark.asyncio
    async def test_negative_ledger_sum_rejected(self, ledger):
        await ledger.ensure_balance("alice", NOW)
        balance = await ledger.lock("alice")

        with pytest.raises(InvalidAmountError):
            await ledger.apply_correction(balance, FuelPool.EPHEMERAL, -1, "bad", NOW)
