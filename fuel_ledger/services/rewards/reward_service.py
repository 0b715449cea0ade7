"""
Reward service.

Public ledger operations. Each method is one database transaction:
admission checks, credits and log appends commit together, and a
rejection rolls back whatever the admission checks already wrote.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.config.settings import settings
from fuel_ledger.models.credit_transaction import CreditTransaction
from fuel_ledger.models.enums import FuelPool, PeriodKind
from fuel_ledger.repositories.credit_transaction_repository import (
    CreditTransactionRepository,
)
from fuel_ledger.services.base_service import BaseService, log_operation, transaction
from fuel_ledger.services.rewards import catalog
from fuel_ledger.services.rewards.catalog import OneTimeRule, RecurringRule, ReferralRule
from fuel_ledger.services.rewards.idempotency_guard import IdempotencyGuard
from fuel_ledger.services.rewards.ledger_core import BalanceSnapshot, LedgerCore
from fuel_ledger.services.rewards.referral_attributor import (
    ReferralAttributor,
    ReferralOutcome,
    ReferralStatus,
)
from fuel_ledger.services.rewards.window_counter import WindowCounter
from fuel_ledger.utils.datetime_utils import Clock, utc_now
from fuel_ledger.utils.exceptions import MalformedRequestError


PROMO_ACTION = "promo_code"
FREE_PING_ACTION = "ping_free"


class AwardStatus(StrEnum):
    """Outcome of an award."""

    AWARDED = "awarded"
    ALREADY_COMPLETED = "already_completed"
    CAP_REACHED = "cap_reached"
    INVALID_REFERRAL_CODE = "invalid_referral_code"
    ALREADY_REFERRED = "already_referred"
    SELF_REFERRAL = "self_referral"


REFERRAL_STATUS_MAP = {
    ReferralStatus.ATTRIBUTED: AwardStatus.AWARDED,
    ReferralStatus.INVALID_CODE: AwardStatus.INVALID_REFERRAL_CODE,
    ReferralStatus.ALREADY_REFERRED: AwardStatus.ALREADY_REFERRED,
    ReferralStatus.SELF_REFERRAL: AwardStatus.SELF_REFERRAL,
}


@dataclass(frozen=True)
class AwardResult:
    """Result of award and promo redemption."""

    status: AwardStatus
    action_id: str
    awarded: int = 0
    pool: FuelPool = FuelPool.PERMANENT
    balances: BalanceSnapshot | None = None
    cap_period: PeriodKind | None = None
    cap_current: int | None = None
    cap_max: int | None = None
    referrer_id: str | None = None

    @property
    def already_completed(self) -> bool:
        return self.status is AwardStatus.ALREADY_COMPLETED

    @property
    def is_rejection(self) -> bool:
        return self.status not in (AwardStatus.AWARDED, AwardStatus.ALREADY_COMPLETED)


class SpendStatus(StrEnum):
    """Outcome of a spend."""

    CHARGED = "charged"
    FREE = "free"
    INSUFFICIENT_FUEL = "insufficient_fuel"


@dataclass(frozen=True)
class SpendResult:
    """Result of a spend."""

    status: SpendStatus
    action_id: str
    cost: int
    charged: int
    balances: BalanceSnapshot
    free_remaining: int | None = None

    @property
    def is_rejection(self) -> bool:
        return self.status is SpendStatus.INSUFFICIENT_FUEL


@dataclass(frozen=True)
class ProvisionResult:
    """Result of explicit provisioning."""

    user_id: str
    referral_code: str
    balances: BalanceSnapshot


class RewardService(BaseService):
    """
    Ledger orchestration.

    Resolves catalog rules, runs the matching admission check and hands
    admitted rewards to the ledger core.
    """

    def __init__(self, session: AsyncSession, clock: Clock = utc_now) -> None:
        """
        Initialize reward service.

        Args:
            session: Async database session
            clock: Source of the current time (UTC)
        """
        super().__init__(session)
        self.clock = clock
        self.ledger = LedgerCore(session)
        self.guard = IdempotencyGuard(session)
        self.window_counter = WindowCounter(session, self.ledger)
        self.attributor = ReferralAttributor(session, self.ledger, self.guard)
        self.transaction_repo = CreditTransactionRepository(session)

    @transaction
    @log_operation
    async def award(
        self,
        user_id: str,
        action_id: str,
        metadata: dict[str, Any] | None = None,
    ) -> AwardResult:
        """
        Award the reward of one user action.

        Args:
            user_id: Acting user
            action_id: Catalog action
            metadata: Extra input; ``referralCode`` for the referral action

        Returns:
            AwardResult

        Raises:
            InvalidActionError: Unknown action
            MalformedRequestError: Referral action without a code
            BalanceNotFoundError: Balance missing (lazy provisioning off)
                or disabled
        """
        rule = catalog.resolve(action_id)
        now = self.clock()
        await self.ledger.ensure_balance(user_id, now, create=settings.lazy_provisioning)

        if isinstance(rule, ReferralRule):
            return await self._award_referral(user_id, rule, metadata, now)

        if isinstance(rule, OneTimeRule):
            rejection = await self._claim_once(user_id, action_id, rule, now)
        elif isinstance(rule, RecurringRule):
            rejection = await self._admit_recurring(user_id, action_id, rule, now)
        else:
            raise TypeError(f"Unhandled reward rule {type(rule).__name__}")

        if rejection is not None:
            return rejection

        balances = await self.ledger.credit(
            user_id=user_id,
            pool=rule.pool,
            amount=rule.amount,
            action_type=action_id,
            description=f"Reward for {action_id}",
            now=now,
        )
        return AwardResult(
            AwardStatus.AWARDED,
            action_id,
            awarded=rule.amount,
            pool=rule.pool,
            balances=balances,
        )

    async def _claim_once(
        self, user_id: str, action_id: str, rule: OneTimeRule, now: datetime
    ) -> AwardResult | None:
        if await self.guard.try_claim(user_id, action_id, rule.amount, now):
            return None
        return AwardResult(
            AwardStatus.ALREADY_COMPLETED,
            action_id,
            pool=rule.pool,
            balances=await self.ledger.snapshot(user_id),
        )

    async def _admit_recurring(
        self, user_id: str, action_id: str, rule: RecurringRule, now: datetime
    ) -> AwardResult | None:
        if rule.monthly_cap is not None:
            await self.window_counter.roll_monthly(user_id, now)

        for period_kind, cap in rule.caps:
            admission = await self.window_counter.try_admit(
                user_id, action_id, cap, period_kind, now
            )
            if not admission.admitted:
                # Counters already incremented for earlier caps roll back with the result
                return AwardResult(
                    AwardStatus.CAP_REACHED,
                    action_id,
                    pool=rule.pool,
                    balances=await self.ledger.snapshot(user_id),
                    cap_period=period_kind,
                    cap_current=admission.count,
                    cap_max=cap,
                )
        return None

    async def _award_referral(
        self,
        user_id: str,
        rule: ReferralRule,
        metadata: dict[str, Any] | None,
        now: datetime,
    ) -> AwardResult:
        code = (metadata or {}).get("referralCode")
        if not isinstance(code, str) or not code:
            raise MalformedRequestError("metadata.referralCode is required")

        outcome = await self.attributor.redeem(code, user_id, rule, now)
        return AwardResult(
            REFERRAL_STATUS_MAP[outcome.status],
            catalog.REFERRAL_ACTION,
            awarded=outcome.welcome_awarded,
            pool=rule.pool,
            balances=outcome.balances or await self.ledger.snapshot(user_id),
            referrer_id=outcome.referrer_id,
        )

    @transaction
    @log_operation
    async def redeem_referral(self, referral_code: str, new_user_id: str) -> ReferralOutcome:
        """
        Redeem a referral code for a new user.

        Args:
            referral_code: Code entered by the new user
            new_user_id: Referred user

        Returns:
            ReferralOutcome
        """
        rule = catalog.resolve(catalog.REFERRAL_ACTION)
        now = self.clock()
        await self.ledger.ensure_balance(new_user_id, now, create=settings.lazy_provisioning)
        return await self.attributor.redeem(referral_code, new_user_id, rule, now)

    @transaction
    @log_operation
    async def spend(self, user_id: str, action_id: str) -> SpendResult:
        """
        Charge fuel for an AI-assisted feature.

        Pings are free up to the daily allowance of free pings.

        Args:
            user_id: Acting user
            action_id: Feature from the spend cost table

        Returns:
            SpendResult

        Raises:
            InvalidActionError: Unknown feature
            BalanceNotFoundError: No active balance
        """
        cost = catalog.resolve_spend_cost(action_id)
        now = self.clock()
        await self.ledger.ensure_balance(user_id, now, create=settings.lazy_provisioning)

        if action_id == catalog.PING_ACTION and settings.free_pings_per_day > 0:
            admission = await self.window_counter.try_admit(
                user_id,
                FREE_PING_ACTION,
                settings.free_pings_per_day,
                PeriodKind.DAILY,
                now,
            )
            if admission.admitted:
                return SpendResult(
                    SpendStatus.FREE,
                    action_id,
                    cost=cost,
                    charged=0,
                    balances=await self.ledger.refill_ephemeral(user_id, now),
                    free_remaining=admission.remaining,
                )

        debit = await self.ledger.debit(user_id, cost, action_id, now)
        if not debit.charged:
            return SpendResult(
                SpendStatus.INSUFFICIENT_FUEL,
                action_id,
                cost=cost,
                charged=0,
                balances=debit.balances,
            )
        return SpendResult(
            SpendStatus.CHARGED,
            action_id,
            cost=cost,
            charged=debit.amount,
            balances=debit.balances,
        )

    @transaction
    @log_operation
    async def redeem_promo(self, user_id: str, code: str) -> AwardResult:
        """
        Redeem a promo code, once per user per code.

        Args:
            user_id: Acting user
            code: Promo code (case-sensitive)

        Returns:
            AwardResult

        Raises:
            InvalidPromoCodeError: Unknown code
            BalanceNotFoundError: No active balance
        """
        amount = catalog.resolve_promo(code)
        now = self.clock()
        await self.ledger.ensure_balance(user_id, now, create=settings.lazy_provisioning)

        if not await self.guard.try_claim(user_id, f"promo:{code}", amount, now):
            return AwardResult(
                AwardStatus.ALREADY_COMPLETED,
                PROMO_ACTION,
                balances=await self.ledger.snapshot(user_id),
            )

        balances = await self.ledger.credit(
            user_id=user_id,
            pool=FuelPool.PERMANENT,
            amount=amount,
            action_type=PROMO_ACTION,
            description=f"Promo code {code}",
            now=now,
        )
        return AwardResult(
            AwardStatus.AWARDED, PROMO_ACTION, awarded=amount, balances=balances
        )

    @transaction
    async def provision(self, user_id: str) -> ProvisionResult:
        """
        Create the user's balance if it does not exist.

        Raises:
            BalanceNotFoundError: If the balance was disabled
        """
        balance = await self.ledger.ensure_balance(user_id, self.clock(), create=True)
        return ProvisionResult(
            user_id=user_id,
            referral_code=balance.referral_code,
            balances=BalanceSnapshot.of(balance),
        )

    @transaction
    async def deactivate(self, user_id: str) -> None:
        """
        Soft-disable the user's balance on account deletion.

        Raises:
            BalanceNotFoundError: If there is no active balance
        """
        await self.ledger.deactivate(user_id, self.clock())

    async def get_balance(self, user_id: str) -> BalanceSnapshot:
        """
        Read-only snapshot of both pools.

        Raises:
            BalanceNotFoundError: If there is no active balance
        """
        return await self.ledger.snapshot(user_id)

    async def get_history(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> tuple[list[CreditTransaction], int]:
        """
        Transaction log of a user, newest first.

        Args:
            user_id: User ID
            limit: Page size
            offset: Records to skip

        Returns:
            Tuple of (records, total_count)

        Raises:
            BalanceNotFoundError: If the user has no active balance
        """
        await self.ledger.snapshot(user_id)
        return await self.transaction_repo.get_history(user_id, limit=limit, offset=offset)
