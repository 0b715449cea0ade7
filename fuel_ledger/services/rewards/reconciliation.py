"""
Balance reconciliation.

Recomputes cached pools from the transaction log, which is authoritative.
Every mismatch is logged at ERROR level for monitoring and corrected with
an audit row; a balance never changes silently.
"""

from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.models.balance_correction import BalanceCorrection
from fuel_ledger.models.enums import FuelPool
from fuel_ledger.repositories.credit_transaction_repository import (
    CreditTransactionRepository,
)
from fuel_ledger.repositories.user_balance_repository import UserBalanceRepository
from fuel_ledger.services.base_service import BaseService, transaction
from fuel_ledger.services.rewards.ledger_core import LedgerCore
from fuel_ledger.utils.datetime_utils import Clock, utc_now


@dataclass
class ReconciliationReport:
    """Summary of a reconciliation run."""

    checked: int = 0
    corrected: int = 0
    failed: list[str] = field(default_factory=list)


class BalanceReconciler(BaseService):
    """Detects and repairs drift between pools and the transaction log."""

    def __init__(self, session: AsyncSession, clock: Clock = utc_now) -> None:
        super().__init__(session)
        self.clock = clock
        self.ledger = LedgerCore(session)
        self.balance_repo = UserBalanceRepository(session)
        self.transaction_repo = CreditTransactionRepository(session)

    @transaction
    async def reconcile_user(self, user_id: str) -> list[BalanceCorrection]:
        """
        Compare one user's pools with the log and correct mismatches.

        The balance row is locked before summing so no credit can land
        between the sum and the correction.

        Args:
            user_id: User ID

        Returns:
            Corrections applied (empty when consistent)

        Raises:
            BalanceNotFoundError: If there is no active balance
        """
        balance = await self.ledger.lock(user_id)
        sums = await self.transaction_repo.sum_by_pool(user_id)
        now = self.clock()

        corrections = []
        for pool in FuelPool:
            cached = balance.ephemeral_pool if pool == FuelPool.EPHEMERAL else balance.permanent_pool
            ledger_sum = sums[pool]
            if cached == ledger_sum:
                continue

            self.logger.error(
                "Balance diverged from transaction log",
                extra={
                    "user_id": user_id,
                    "pool": pool.value,
                    "cached": cached,
                    "ledger_sum": ledger_sum,
                },
            )
            corrections.append(
                await self.ledger.apply_correction(
                    balance,
                    pool,
                    ledger_sum,
                    reason=f"Cached {pool.value} pool {cached} != ledger sum {ledger_sum}",
                    now=now,
                )
            )
        return corrections

    async def reconcile_all(self, batch_size: int = 500) -> ReconciliationReport:
        """
        Reconcile every active balance, one transaction per user.

        A failing user is logged and skipped so one bad row cannot stall
        the whole run.

        Args:
            batch_size: Balances loaded per page

        Returns:
            ReconciliationReport
        """
        report = ReconciliationReport()
        after_id = 0

        while True:
            page = await self.balance_repo.get_active_user_ids(after_id, batch_size)
            await self.rollback()
            if not page:
                break

            for row_id, user_id in page:
                after_id = row_id
                report.checked += 1
                try:
                    corrections = await self.reconcile_user(user_id)
                except Exception as e:
                    self.logger.error(
                        "Reconciliation failed",
                        extra={"user_id": user_id, "error": str(e)},
                    )
                    report.failed.append(user_id)
                    continue
                if corrections:
                    report.corrected += 1

        self.logger.info(
            "Reconciliation finished",
            extra={
                "checked": report.checked,
                "corrected": report.corrected,
                "failed": len(report.failed),
            },
        )
        return report
