"""
Ledger core.

The only component that writes user balances. Every pool change is paired
with an appended CreditTransaction inside the caller's database
transaction, so the log always sums to the cached pools.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.config.settings import settings
from fuel_ledger.models.balance_correction import BalanceCorrection
from fuel_ledger.models.enums import FuelPool
from fuel_ledger.models.user_balance import UserBalance
from fuel_ledger.repositories.balance_correction_repository import (
    BalanceCorrectionRepository,
)
from fuel_ledger.repositories.credit_transaction_repository import (
    CreditTransactionRepository,
)
from fuel_ledger.repositories.user_balance_repository import UserBalanceRepository
from fuel_ledger.services.base_service import BaseService
from fuel_ledger.utils.datetime_utils import day_key
from fuel_ledger.utils.exceptions import BalanceNotFoundError, InvalidAmountError


# Attempts at drawing an unused referral code before giving up
REFERRAL_CODE_ATTEMPTS = 5

DAILY_REFILL_ACTION = "daily_refill"
CORRECTION_ACTION = "reconciliation"


@dataclass(frozen=True)
class BalanceSnapshot:
    """Both pools of a balance at one point in time."""

    ephemeral: int
    permanent: int

    @property
    def total(self) -> int:
        return self.ephemeral + self.permanent

    @classmethod
    def of(cls, balance: UserBalance) -> "BalanceSnapshot":
        return cls(ephemeral=balance.ephemeral_pool, permanent=balance.permanent_pool)

    def to_dict(self) -> dict[str, int]:
        return {"ephemeral": self.ephemeral, "permanent": self.permanent}


@dataclass(frozen=True)
class DebitResult:
    """Outcome of a debit attempt."""

    charged: bool
    amount: int
    ephemeral_spent: int
    permanent_spent: int
    balances: BalanceSnapshot

    @property
    def available(self) -> int:
        return self.balances.total


class LedgerCore(BaseService):
    """
    Balance mutations with an append-only audit log.

    Methods never commit: the orchestrating service owns the transaction,
    which makes pool change and log append a single atomic unit.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.balance_repo = UserBalanceRepository(session)
        self.transaction_repo = CreditTransactionRepository(session)
        self.correction_repo = BalanceCorrectionRepository(session)

    async def credit(
        self,
        user_id: str,
        pool: FuelPool,
        amount: int,
        action_type: str,
        description: str,
        now: datetime,
    ) -> BalanceSnapshot:
        """
        Add fuel to one pool and log it.

        Args:
            user_id: User ID
            pool: Pool to credit
            amount: Positive amount
            action_type: Cause recorded in the log
            description: Human-readable log text
            now: Timestamp shared by the update and the log record

        Returns:
            Both pools after the credit

        Raises:
            InvalidAmountError: If amount is not positive
            BalanceNotFoundError: If the user has no active balance
        """
        if amount <= 0:
            raise InvalidAmountError(f"Credit amount must be positive, got {amount}")

        deltas = _pool_deltas(pool, amount)
        pools = await self.balance_repo.change_pools(user_id, now, **deltas)
        if pools is None:
            raise BalanceNotFoundError(user_id)

        await self.transaction_repo.append(
            user_id=user_id,
            amount=amount,
            pool=pool,
            action_type=action_type,
            description=description,
            created_at=now,
        )

        self.logger.info(
            "Fuel credited",
            extra={
                "user_id": user_id,
                "pool": pool.value,
                "amount": amount,
                "action_type": action_type,
            },
        )
        return BalanceSnapshot(*pools)

    async def debit(
        self, user_id: str, amount: int, action_type: str, now: datetime
    ) -> DebitResult:
        """
        Spend fuel, ephemeral pool first.

        The balance row stays locked until the transaction ends. The
        ephemeral pool is refilled first when the day changed.

        Args:
            user_id: User ID
            amount: Positive amount to spend
            action_type: Feature being paid for
            now: Spend time

        Returns:
            DebitResult; ``charged`` is False when fuel is insufficient

        Raises:
            InvalidAmountError: If amount is not positive
            BalanceNotFoundError: If the user has no active balance
        """
        if amount <= 0:
            raise InvalidAmountError(f"Debit amount must be positive, got {amount}")

        balance = await self._lock(user_id)
        current = await self._refill(balance, now)

        if current.total < amount:
            self.logger.info(
                "Insufficient fuel",
                extra={
                    "user_id": user_id,
                    "required": amount,
                    "available": current.total,
                },
            )
            return DebitResult(False, amount, 0, 0, current)

        from_ephemeral = min(current.ephemeral, amount)
        from_permanent = amount - from_ephemeral

        pools = await self.balance_repo.change_pools(
            user_id,
            now,
            ephemeral_delta=-from_ephemeral,
            permanent_delta=-from_permanent,
        )
        for pool, spent in (
            (FuelPool.EPHEMERAL, from_ephemeral),
            (FuelPool.PERMANENT, from_permanent),
        ):
            if spent:
                await self.transaction_repo.append(
                    user_id=user_id,
                    amount=-spent,
                    pool=pool,
                    action_type=action_type,
                    description=f"Used {spent} {pool.value} fuel for {action_type}",
                    created_at=now,
                )

        self.logger.info(
            "Fuel debited",
            extra={
                "user_id": user_id,
                "action_type": action_type,
                "ephemeral": from_ephemeral,
                "permanent": from_permanent,
            },
        )
        return DebitResult(
            True, amount, from_ephemeral, from_permanent, BalanceSnapshot(*pools)
        )

    async def refill_ephemeral(self, user_id: str, now: datetime) -> BalanceSnapshot:
        """
        Refill the ephemeral pool if it was not refilled today.

        Args:
            user_id: User ID
            now: Current time

        Returns:
            Both pools after the refill
        """
        balance = await self._lock(user_id)
        return await self._refill(balance, now)

    async def ensure_balance(
        self, user_id: str, now: datetime, create: bool = True
    ) -> UserBalance:
        """
        Get the user's active balance, provisioning it when allowed.

        Args:
            user_id: User ID
            now: Provisioning time
            create: Provision a missing balance instead of raising

        Returns:
            Active balance

        Raises:
            BalanceNotFoundError: If the balance is disabled, or missing
                and creation is not allowed
        """
        balance = await self.balance_repo.get_by_user(user_id)
        if balance is None:
            if not create:
                raise BalanceNotFoundError(user_id)
            balance = await self._provision(user_id, now)

        if not balance.is_active:
            raise BalanceNotFoundError(user_id)
        return balance

    async def deactivate(self, user_id: str, now: datetime) -> None:
        """
        Soft-disable a balance. Its rows and log are kept.

        Raises:
            BalanceNotFoundError: If there is no active balance
        """
        if not await self.balance_repo.deactivate(user_id, now):
            raise BalanceNotFoundError(user_id)
        self.logger.info("Balance disabled", extra={"user_id": user_id})

    async def roll_window_period(self, user_id: str, period_key: str) -> bool:
        """
        Advance the monthly rollover marker.

        Args:
            user_id: User ID
            period_key: Current YYYY-MM

        Returns:
            True if the marker moved (this caller owns the rollover)
        """
        return await self.balance_repo.claim_window_period(user_id, period_key)

    async def lock(self, user_id: str) -> UserBalance:
        """
        Lock an active balance for the rest of the transaction.

        Raises:
            BalanceNotFoundError: If there is no active balance
        """
        return await self._lock(user_id)

    async def apply_correction(
        self,
        balance: UserBalance,
        pool: FuelPool,
        ledger_sum: int,
        reason: str,
        now: datetime,
    ) -> BalanceCorrection:
        """
        Overwrite a cached pool with its ledger sum and record why.

        Args:
            balance: Balance locked by the caller
            pool: Pool to correct
            ledger_sum: Authoritative value from the transaction log
            reason: Audit text
            now: Correction time

        Returns:
            Audit row

        Raises:
            InvalidAmountError: If the ledger sum is negative
        """
        if ledger_sum < 0:
            raise InvalidAmountError(
                f"Ledger sum for {balance.user_id}/{pool.value} is negative: {ledger_sum}"
            )

        cached = _pool_value(balance, pool)
        await self.balance_repo.set_pool(balance.user_id, pool, ledger_sum, now)
        correction = await self.correction_repo.create(
            user_id=balance.user_id,
            pool=pool.value,
            cached_before=cached,
            ledger_sum=ledger_sum,
            delta=ledger_sum - cached,
            reason=reason,
            created_at=now,
        )

        self.logger.warning(
            "Balance corrected from ledger",
            extra={
                "user_id": balance.user_id,
                "pool": pool.value,
                "cached_before": cached,
                "ledger_sum": ledger_sum,
            },
        )
        return correction

    async def snapshot(self, user_id: str) -> BalanceSnapshot:
        """
        Read both pools.

        Raises:
            BalanceNotFoundError: If there is no active balance
        """
        balance = await self.balance_repo.get_by_user(user_id)
        if balance is None or not balance.is_active:
            raise BalanceNotFoundError(user_id)
        return BalanceSnapshot.of(balance)

    async def _lock(self, user_id: str) -> UserBalance:
        balance = await self.balance_repo.get_for_update(user_id)
        if balance is None:
            raise BalanceNotFoundError(user_id)
        return balance

    async def _provision(self, user_id: str, now: datetime) -> UserBalance:
        for _ in range(REFERRAL_CODE_ATTEMPTS):
            code = generate_referral_code(settings.referral_code_length)
            if await self.balance_repo.insert_if_absent(user_id, code, now):
                self.logger.info(
                    "Balance provisioned",
                    extra={"user_id": user_id, "referral_code": code},
                )
            # No insert: a concurrent request provisioned the user, or the code collided
            balance = await self.balance_repo.get_by_user(user_id)
            if balance is not None:
                return balance

        raise RuntimeError(f"Could not allocate a referral code for user {user_id}")

    async def _refill(self, balance: UserBalance, now: datetime) -> BalanceSnapshot:
        today = day_key(now)
        if balance.last_refill_date == today:
            return BalanceSnapshot.of(balance)

        delta = settings.daily_fuel_allowance - balance.ephemeral_pool
        await self.balance_repo.mark_refilled(balance.user_id, today)
        if delta == 0:
            return BalanceSnapshot.of(balance)

        pools = await self.balance_repo.change_pools(
            balance.user_id, now, ephemeral_delta=delta
        )
        await self.transaction_repo.append(
            user_id=balance.user_id,
            amount=delta,
            pool=FuelPool.EPHEMERAL,
            action_type=DAILY_REFILL_ACTION,
            description=f"Daily fuel refill to {settings.daily_fuel_allowance}",
            created_at=now,
        )
        self.logger.debug(
            "Ephemeral pool refilled",
            extra={"user_id": balance.user_id, "delta": delta, "day": today},
        )
        return BalanceSnapshot(*pools)


def generate_referral_code(length: int) -> str:
    """
    Draw a random upper-case hex referral code.

    Args:
        length: Code length

    Returns:
        Referral code
    """
    return secrets.token_hex(length).upper()[:length]


def _pool_deltas(pool: FuelPool, amount: int) -> dict[str, Any]:
    if pool == FuelPool.EPHEMERAL:
        return {"ephemeral_delta": amount}
    return {"permanent_delta": amount}


def _pool_value(balance: UserBalance, pool: FuelPool) -> int:
    if pool == FuelPool.EPHEMERAL:
        return balance.ephemeral_pool
    return balance.permanent_pool
