"""Integration tests for promo code redemption."""

import pytest

from fuel_ledger.services.rewards import AwardStatus
from fuel_ledger.utils.exceptions import InvalidPromoCodeError


class TestRedeemPromo:
    """Test RewardService.redeem_promo."""

    @pytest.mark.asyncio
    async def test_redeem_once(self, run_service, ledger_state):
        result = await run_service("redeem_promo", "alice", "LAUNCH50")

        assert result.status is AwardStatus.AWARDED
        assert result.action_id == "promo_code"
        assert result.awarded == 50
        assert result.balances.permanent == 50

        again = await run_service("redeem_promo", "alice", "LAUNCH50")

        assert again.status is AwardStatus.ALREADY_COMPLETED
        assert again.awarded == 0
        state = await ledger_state("alice")
        assert state.permanent == 50
        assert state.consistent

    @pytest.mark.asyncio
    async def test_codes_are_independent(self, run_service):
        await run_service("redeem_promo", "alice", "LAUNCH50")

        result = await run_service("redeem_promo", "alice", "BETA10")

        assert result.balances.permanent == 60

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["NOPE", "launch50", ""])
    async def test_unknown_code(self, run_service, code):
        with pytest.raises(InvalidPromoCodeError):
            await run_service("redeem_promo", "alice", code)
