"""
Window counter.

Admission control for recurring rewards capped per calendar day or
calendar month (UTC).
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.models.enums import PeriodKind
from fuel_ledger.repositories.window_count_repository import WindowCountRepository
from fuel_ledger.services.base_service import BaseService
from fuel_ledger.services.rewards.ledger_core import LedgerCore
from fuel_ledger.utils.datetime_utils import day_key, month_key


@dataclass(frozen=True)
class Admission:
    """Outcome of an admission attempt."""

    admitted: bool
    period_kind: PeriodKind
    period_key: str
    count: int
    cap: int

    @property
    def remaining(self) -> int:
        return max(self.cap - self.count, 0)


def period_key_for(period_kind: PeriodKind, now: datetime) -> str:
    """
    Calendar key of the window containing ``now``.

    Args:
        period_kind: Daily or monthly
        now: Admission time

    Returns:
        YYYY-MM-DD for daily windows, YYYY-MM for monthly ones
    """
    if period_kind is PeriodKind.DAILY:
        return day_key(now)
    return month_key(now)


class WindowCounter(BaseService):
    """Atomic check-and-increment of per-period admission counters."""

    def __init__(self, session: AsyncSession, ledger: LedgerCore) -> None:
        super().__init__(session)
        self.ledger = ledger
        self.window_repo = WindowCountRepository(session)

    async def try_admit(
        self,
        user_id: str,
        action_id: str,
        cap: int,
        period_kind: PeriodKind,
        now: datetime,
    ) -> Admission:
        """
        Admit one more occurrence unless the period's cap is reached.

        The cap passed here is authoritative: counters above a since-lowered
        cap stay as they are and simply admit nothing more this period.

        Args:
            user_id: User ID
            action_id: Counted action
            cap: Maximum admissions per period (>= 1)
            period_kind: Daily or monthly
            now: Admission time

        Returns:
            Admission with the new count, or the current count if rejected
        """
        if cap < 1:
            raise ValueError("cap must be at least 1")

        period_key = period_key_for(period_kind, now)
        new_count = await self.window_repo.increment_below(
            user_id=user_id,
            action_id=action_id,
            period_kind=period_kind,
            period_key=period_key,
            cap=cap,
            now=now,
        )

        if new_count is None:
            current = await self.window_repo.get_count(user_id, action_id, period_key)
            self.logger.info(
                "Window cap reached",
                extra={
                    "user_id": user_id,
                    "action_id": action_id,
                    "period_key": period_key,
                    "count": current,
                    "cap": cap,
                },
            )
            return Admission(False, period_kind, period_key, current, cap)

        return Admission(True, period_kind, period_key, new_count, cap)

    async def roll_monthly(self, user_id: str, now: datetime) -> bool:
        """
        Reset the user's monthly counters when a new month started.

        Runs inside the admission transaction so no scheduled job is
        needed to unblock a saturated counter.

        Args:
            user_id: User ID
            now: Admission time

        Returns:
            True if this call performed the rollover
        """
        period_key = month_key(now)
        if not await self.ledger.roll_window_period(user_id, period_key):
            return False

        reset = await self.window_repo.reset_other_periods(
            user_id, PeriodKind.MONTHLY, period_key
        )
        self.logger.info(
            "Monthly windows rolled over",
            extra={"user_id": user_id, "period_key": period_key, "reset": reset},
        )
        return True
