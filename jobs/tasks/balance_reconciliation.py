"""
Balance reconciliation task.

Rebuilds cached pools from the transaction log for every active balance.
Runs once per day; a Redis lock keeps overlapping runs from racing each
other.
"""

import dramatiq
import redis.asyncio as redis
from loguru import logger
from redis.exceptions import LockError

from fuel_ledger.config.settings import settings
from fuel_ledger.services.rewards import BalanceReconciler, ReconciliationReport
from jobs.async_runner import async_actor
from jobs.broker import broker  # noqa: F401  (registers the broker)
from jobs.utils import task_session

LOCK_KEY = "fuel_ledger:reconciliation"
LOCK_TIMEOUT_SECONDS = 30 * 60


@dramatiq.actor(max_retries=3, time_limit=LOCK_TIMEOUT_SECONDS * 1000)
@async_actor
async def reconcile_balances(batch_size: int | None = None) -> dict:
    """
    Reconcile all active balances.

    Args:
        batch_size: Balances loaded per page (defaults to settings)

    Returns:
        Summary dict (checked, corrected, failed)
    """
    batch_size = batch_size or settings.reconciliation_batch_size
    logger.info(f"Starting balance reconciliation (batch size {batch_size})...")

    redis_client = redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        db=settings.redis_db,
    )
    lock = redis_client.lock(LOCK_KEY, timeout=LOCK_TIMEOUT_SECONDS, blocking=False)

    try:
        if not await lock.acquire():
            logger.warning("Reconciliation already running elsewhere, skipping")
            return {"skipped": True}

        try:
            report = await _reconcile(batch_size)
        finally:
            try:
                await lock.release()
            except LockError:
                logger.warning("Reconciliation lock expired before release")
    finally:
        await redis_client.aclose()

    if report.corrected:
        logger.error(
            f"Balance reconciliation corrected {report.corrected} balances",
            extra={"corrected": report.corrected},
        )
    logger.info(
        f"Balance reconciliation complete: {report.checked} checked, "
        f"{report.corrected} corrected, {len(report.failed)} failed"
    )
    return {
        "checked": report.checked,
        "corrected": report.corrected,
        "failed": report.failed,
    }


async def _reconcile(batch_size: int) -> ReconciliationReport:
    async with task_session() as session:
        return await BalanceReconciler(session).reconcile_all(batch_size)
