"""
Unit tests for the action catalog.

Tests cover:
- Reward rule lookup for one-time, recurring and referral actions
- Cap validation
- Spend costs and promo codes
"""

import pytest

from fuel_ledger.config.settings import settings
from fuel_ledger.models.enums import FuelPool, PeriodKind
from fuel_ledger.services.rewards.catalog import (
    ACTION_CATALOG,
    SPEND_COSTS,
    OneTimeRule,
    RecurringRule,
    ReferralRule,
    resolve,
    resolve_promo,
    resolve_spend_cost,
)
from fuel_ledger.utils.exceptions import InvalidActionError, InvalidPromoCodeError


class TestResolve:
    """Test reward rule resolution."""

    def test_github_star_is_one_time_permanent(self):
        rule = resolve("github_star")

        assert isinstance(rule, OneTimeRule)
        assert rule.amount == 100
        assert rule.pool == FuelPool.PERMANENT

    @pytest.mark.parametrize(
        "action_id,amount",
        [
            ("linkedin_follow", 50),
            ("discord_join", 50),
            ("telegram_join", 25),
            ("x_follow", 25),
        ],
    )
    def test_social_follows(self, action_id, amount):
        assert resolve(action_id) == OneTimeRule(amount)

    def test_job_share_has_daily_cap(self):
        rule = resolve("job_share")

        assert isinstance(rule, RecurringRule)
        assert rule.amount == 5
        assert rule.daily_cap == 5
        assert rule.monthly_cap is None
        assert rule.caps == [(PeriodKind.DAILY, 5)]

    def test_vouch_received_has_monthly_cap(self):
        rule = resolve("vouch_received")

        assert rule.amount == 25
        assert rule.caps == [(PeriodKind.MONTHLY, 5)]

    def test_referral_amount_comes_from_settings(self):
        rule = resolve("referral")

        assert isinstance(rule, ReferralRule)
        assert rule.amount == settings.referral_reward_amount
        assert rule.pool == FuelPool.PERMANENT

    def test_unknown_action_raises(self):
        with pytest.raises(InvalidActionError) as exc_info:
            resolve("moon_landing")

        assert exc_info.value.action_id == "moon_landing"
        assert exc_info.value.code == "invalid_action"

    def test_all_amounts_positive(self):
        for action_id, rule in ACTION_CATALOG.items():
            assert rule.amount > 0, action_id


class TestRecurringRule:
    """Test cap validation."""

    def test_both_caps_daily_first(self):
        rule = RecurringRule(5, daily_cap=2, monthly_cap=10)

        assert rule.caps == [(PeriodKind.DAILY, 2), (PeriodKind.MONTHLY, 10)]

    def test_uncapped_rule_has_no_caps(self):
        assert RecurringRule(1).caps == []

    @pytest.mark.parametrize("cap", [0, -1])
    def test_cap_below_one_rejected(self, cap):
        with pytest.raises(ValueError):
            RecurringRule(5, daily_cap=cap)


class TestSpendCosts:
    """Test feature costs."""

    def test_known_costs(self):
        assert resolve_spend_cost("cv_builder") == 10
        assert resolve_spend_cost("interview_prep") == 5
        assert resolve_spend_cost("resume_match") == 3
        assert resolve_spend_cost("ping") == 15

    def test_unknown_feature_raises(self):
        with pytest.raises(InvalidActionError):
            resolve_spend_cost("teleport")

    def test_costs_positive(self):
        assert all(cost > 0 for cost in SPEND_COSTS.values())


class TestPromoCodes:
    """Test promo code lookup."""

    def test_configured_code(self):
        assert resolve_promo("LAUNCH50") == 50

    def test_codes_are_case_sensitive(self):
        with pytest.raises(InvalidPromoCodeError):
            resolve_promo("launch50")

    def test_unknown_code_raises(self, monkeypatch):
        monkeypatch.setattr(settings, "promo_codes", {})

        with pytest.raises(InvalidPromoCodeError):
            resolve_promo("LAUNCH50")
