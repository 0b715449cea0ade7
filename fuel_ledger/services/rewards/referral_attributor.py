"""
Referral attributor.

Records who referred a new user, at most once per referred user, and pays
both sides through the idempotency guard so a retried redemption never
pays twice.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.config.settings import settings
from fuel_ledger.models.enums import FuelPool
from fuel_ledger.repositories.referral_repository import ReferralRepository
from fuel_ledger.repositories.user_balance_repository import UserBalanceRepository
from fuel_ledger.services.base_service import BaseService
from fuel_ledger.services.rewards.catalog import REFERRAL_ACTION, ReferralRule
from fuel_ledger.services.rewards.idempotency_guard import IdempotencyGuard
from fuel_ledger.services.rewards.ledger_core import BalanceSnapshot, LedgerCore


WELCOME_ACTION = "referral_welcome"


def referrer_marker(referred_id: str) -> str:
    """Completion marker key of the referrer's payout for one referred user."""
    return f"{REFERRAL_ACTION}:{referred_id}"


class ReferralStatus(StrEnum):
    """Outcome of a redemption."""

    ATTRIBUTED = "attributed"
    INVALID_CODE = "invalid_code"
    ALREADY_REFERRED = "already_referred"
    SELF_REFERRAL = "self_referral"


@dataclass(frozen=True)
class ReferralOutcome:
    """Result of Referral Attributor redeem."""

    status: ReferralStatus
    referrer_id: str | None = None
    referrer_awarded: int = 0
    welcome_awarded: int = 0
    balances: BalanceSnapshot | None = None

    @property
    def is_rejection(self) -> bool:
        return self.status is not ReferralStatus.ATTRIBUTED


class ReferralAttributor(BaseService):
    """Validates referral codes and pays referral rewards."""

    def __init__(
        self, session: AsyncSession, ledger: LedgerCore, guard: IdempotencyGuard
    ) -> None:
        super().__init__(session)
        self.ledger = ledger
        self.guard = guard
        self.referral_repo = ReferralRepository(session)
        self.balance_repo = UserBalanceRepository(session)

    async def redeem(
        self,
        referral_code: str,
        new_user_id: str,
        rule: ReferralRule,
        now: datetime,
    ) -> ReferralOutcome:
        """
        Attribute a new user to the owner of a referral code.

        The new user's balance must already exist (see
        ``LedgerCore.ensure_balance``).

        Args:
            referral_code: Code entered by the new user
            new_user_id: Referred user
            rule: Referrer reward rule
            now: Redemption time

        Returns:
            ReferralOutcome
        """
        referrer = await self.balance_repo.get_by_referral_code(referral_code)
        if referrer is None:
            self.logger.info(
                "Unknown referral code",
                extra={"new_user_id": new_user_id},
            )
            return ReferralOutcome(ReferralStatus.INVALID_CODE)

        referrer_id = referrer.user_id
        if referrer_id == new_user_id:
            self.logger.warning(
                "Self-referral rejected",
                extra={"user_id": new_user_id},
            )
            return ReferralOutcome(ReferralStatus.SELF_REFERRAL, referrer_id=referrer_id)

        created = await self.referral_repo.insert_if_absent(referrer_id, new_user_id, now)
        if not created:
            existing = await self.referral_repo.get_by_referred(new_user_id)
            # Only a partially paid record of the same referrer may be resumed
            if existing is None or existing.referrer_id != referrer_id or existing.is_settled:
                self.logger.info(
                    "User already referred",
                    extra={"user_id": new_user_id, "referrer_id": referrer_id},
                )
                return ReferralOutcome(ReferralStatus.ALREADY_REFERRED, referrer_id=referrer_id)

        # Both rows locked in user_id order before either is credited
        for user_id in sorted((referrer_id, new_user_id)):
            await self.ledger.lock(user_id)

        referrer_awarded = 0
        if await self.guard.try_claim(
            referrer_id, referrer_marker(new_user_id), rule.amount, now
        ):
            await self.ledger.credit(
                user_id=referrer_id,
                pool=rule.pool,
                amount=rule.amount,
                action_type=REFERRAL_ACTION,
                description=f"Referral reward for inviting {new_user_id}",
                now=now,
            )
            referrer_awarded = rule.amount

        welcome_awarded = 0
        welcome = settings.referral_welcome_amount
        if welcome > 0 and await self.guard.try_claim(new_user_id, WELCOME_ACTION, welcome, now):
            await self.ledger.credit(
                user_id=new_user_id,
                pool=FuelPool.PERMANENT,
                amount=welcome,
                action_type=WELCOME_ACTION,
                description="Welcome bonus for joining with a referral code",
                now=now,
            )
            welcome_awarded = welcome

        await self.referral_repo.mark_rewarded(new_user_id, referrer=True, referred=True)

        self.logger.info(
            "Referral attributed",
            extra={
                "referrer_id": referrer_id,
                "referred_id": new_user_id,
                "referrer_awarded": referrer_awarded,
                "welcome_awarded": welcome_awarded,
            },
        )
        return ReferralOutcome(
            ReferralStatus.ATTRIBUTED,
            referrer_id=referrer_id,
            referrer_awarded=referrer_awarded,
            welcome_awarded=welcome_awarded,
            balances=await self.ledger.snapshot(new_user_id),
        )
