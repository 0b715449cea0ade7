"""
Integration tests for the admission gates against SQLite.

Tests cover:
- Idempotency guard claims under concurrency
- Window counter check-and-increment under concurrency
- Lowered caps and period boundaries
"""

import asyncio
from datetime import UTC, datetime

import pytest

from fuel_ledger.models.enums import PeriodKind
from fuel_ledger.repositories.completion_marker_repository import (
    CompletionMarkerRepository,
)
from fuel_ledger.services.rewards import IdempotencyGuard, LedgerCore, WindowCounter


NOW = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)


class TestIdempotencyGuard:
    """Test completion markers."""

    @pytest.mark.asyncio
    async def test_second_claim_rejected(self, session):
        guard = IdempotencyGuard(session)

        assert await guard.try_claim("alice", "github_star", 100, NOW) is True
        assert await guard.try_claim("alice", "github_star", 100, NOW) is False
        assert await guard.is_claimed("alice", "github_star") is True

    @pytest.mark.asyncio
    async def test_claims_are_per_user_and_action(self, session):
        guard = IdempotencyGuard(session)

        assert await guard.try_claim("alice", "github_star", 100, NOW)
        assert await guard.try_claim("bob", "github_star", 100, NOW)
        assert await guard.try_claim("alice", "discord_join", 50, NOW)
        assert await guard.is_claimed("bob", "discord_join") is False

    @pytest.mark.asyncio
    @pytest.mark.slow
    async def test_concurrent_claims_single_winner(self, session_maker):
        async def claim() -> bool:
            async with session_maker() as session:
                claimed = await IdempotencyGuard(session).try_claim(
                    "alice", "github_star", 100, NOW
                )
                await session.commit()
                return claimed

        results = await asyncio.gather(*(claim() for _ in range(8)))

        assert results.count(True) == 1
        async with session_maker() as session:
            markers = await CompletionMarkerRepository(session).count(
                user_id="alice", action_id="github_star"
            )
        assert markers == 1


class TestWindowCounter:
    """Test per-period counters."""

    @pytest.mark.asyncio
    async def test_admits_up_to_cap(self, session):
        counter = WindowCounter(session, LedgerCore(session))

        admissions = [
            await counter.try_admit("bob", "job_share", 3, PeriodKind.DAILY, NOW)
            for _ in range(4)
        ]

        assert [a.admitted for a in admissions] == [True, True, True, False]
        assert [a.count for a in admissions] == [1, 2, 3, 3]

    @pytest.mark.asyncio
    async def test_new_day_starts_fresh_window(self, session):
        counter = WindowCounter(session, LedgerCore(session))
        for _ in range(2):
            await counter.try_admit("bob", "job_share", 2, PeriodKind.DAILY, NOW)

        tomorrow = datetime(2026, 10, 18, 0, 0, 1, tzinfo=UTC)
        admission = await counter.try_admit("bob", "job_share", 2, PeriodKind.DAILY, tomorrow)

        assert admission.admitted is True
        assert admission.count == 1
        assert admission.period_key == "2026-10-18"

    @pytest.mark.asyncio
    async def test_lowered_cap_is_authoritative(self, session):
        counter = WindowCounter(session, LedgerCore(session))
        for _ in range(4):
            await counter.try_admit("bob", "vouch_given", 5, PeriodKind.MONTHLY, NOW)

        admission = await counter.try_admit("bob", "vouch_given", 3, PeriodKind.MONTHLY, NOW)

        assert admission.admitted is False
        assert admission.count == 4

    @pytest.mark.asyncio
    @pytest.mark.slow
    async def test_concurrent_admissions_never_exceed_cap(self, session_maker):
        cap = 5

        async def admit() -> bool:
            async with session_maker() as session:
                counter = WindowCounter(session, LedgerCore(session))
                admission = await counter.try_admit(
                    "bob", "job_share", cap, PeriodKind.DAILY, NOW
                )
                await session.commit()
                return admission.admitted

        results = await asyncio.gather(*(admit() for _ in range(9)))

        assert results.count(True) == cap
        assert results.count(False) == 9 - cap
