"""
Action catalog.

Static reward rules, spend costs and promo codes. Pure data: resolving
an entry never touches storage.
"""

from dataclasses import dataclass

from fuel_ledger.config.settings import settings
from fuel_ledger.models.enums import FuelPool, PeriodKind
from fuel_ledger.utils.exceptions import InvalidActionError, InvalidPromoCodeError


@dataclass(frozen=True)
class OneTimeRule:
    """Paid at most once per user, ever."""

    amount: int
    pool: FuelPool = FuelPool.PERMANENT


@dataclass(frozen=True)
class RecurringRule:
    """Paid on every admission within optional per-period caps."""

    amount: int
    pool: FuelPool = FuelPool.PERMANENT
    daily_cap: int | None = None
    monthly_cap: int | None = None

    def __post_init__(self) -> None:
        for cap in (self.daily_cap, self.monthly_cap):
            if cap is not None and cap < 1:
                raise ValueError("Window caps must be at least 1")

    @property
    def caps(self) -> list[tuple[PeriodKind, int]]:
        """Configured caps, daily before monthly."""
        caps = []
        if self.daily_cap is not None:
            caps.append((PeriodKind.DAILY, self.daily_cap))
        if self.monthly_cap is not None:
            caps.append((PeriodKind.MONTHLY, self.monthly_cap))
        return caps


@dataclass(frozen=True)
class ReferralRule:
    """Paid to the referrer once per referred user."""

    amount: int
    pool: FuelPool = FuelPool.PERMANENT


RewardRule = OneTimeRule | RecurringRule | ReferralRule


REFERRAL_ACTION = "referral"

ACTION_CATALOG: dict[str, OneTimeRule | RecurringRule] = {
    # Social follows
    "github_star": OneTimeRule(100),
    "linkedin_follow": OneTimeRule(50),
    "whatsapp_join": OneTimeRule(50),
    "tiktok_follow": OneTimeRule(50),
    "discord_join": OneTimeRule(50),
    "youtube_subscribe": OneTimeRule(50),
    "spotify_follow": OneTimeRule(25),
    "telegram_join": OneTimeRule(25),
    "facebook_follow": OneTimeRule(25),
    "instagram_follow": OneTimeRule(25),
    "linkedin_post_share": OneTimeRule(25),
    "x_follow": OneTimeRule(25),
    # Sharing
    "community_share": RecurringRule(5, daily_cap=3),
    "job_share": RecurringRule(5, daily_cap=5),
    # Vouching
    "vouch_received": RecurringRule(25, monthly_cap=5),
    "vouch_given": RecurringRule(5, monthly_cap=5),
}


# Fuel charged per AI-assisted feature
PING_ACTION = "ping"

SPEND_COSTS: dict[str, int] = {
    "cv_builder": 10,
    "interview_prep": 5,
    "resume_match": 3,
    PING_ACTION: 15,
}


def resolve(action_id: str) -> RewardRule:
    """
    Resolve an action id to its reward rule.

    Args:
        action_id: Action identifier

    Returns:
        Reward rule

    Raises:
        InvalidActionError: If the action is not in the catalog
    """
    if action_id == REFERRAL_ACTION:
        return ReferralRule(settings.referral_reward_amount)

    rule = ACTION_CATALOG.get(action_id)
    if rule is None:
        raise InvalidActionError(action_id)
    return rule


def resolve_spend_cost(action_id: str) -> int:
    """
    Fuel cost of a feature.

    Raises:
        InvalidActionError: If the feature has no cost entry
    """
    try:
        return SPEND_COSTS[action_id]
    except KeyError:
        raise InvalidActionError(action_id) from None


def resolve_promo(code: str) -> int:
    """
    Amount awarded by a promo code.

    Raises:
        InvalidPromoCodeError: If the code is not configured
    """
    amount = settings.promo_codes.get(code)
    if amount is None:
        raise InvalidPromoCodeError()
    return amount
