"""
Task scheduler.

Enqueues periodic ledger tasks on the dramatiq broker and serves the
scheduler health endpoints. Workers run separately:

    dramatiq jobs.tasks.balance_reconciliation
"""

import asyncio
import sys

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from fuel_ledger.config.logging import setup_logging
from fuel_ledger.config.settings import settings
from jobs.health import start_health_server, stop_health_server
from jobs.tasks.balance_reconciliation import reconcile_balances


def create_scheduler() -> AsyncIOScheduler:
    """
    Create the scheduler with all periodic jobs registered.

    Returns:
        Scheduler (not started)
    """
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        reconcile_balances.send,
        CronTrigger(hour=settings.reconciliation_hour_utc, minute=0, timezone="UTC"),
        id="balance_reconciliation",
        name="Balance reconciliation",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    return scheduler


async def main() -> None:
    """Run the scheduler until cancelled."""
    setup_logging("scheduler")

    scheduler = create_scheduler()
    scheduler.start()
    logger.info(
        f"Scheduler started: reconciliation daily at {settings.reconciliation_hour_utc:02d}:00 UTC"
    )

    runner = await start_health_server(scheduler, port=settings.health_check_port)
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        await stop_health_server(runner)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Scheduler stopped by user (KeyboardInterrupt)")
    except Exception as e:
        logger.exception(f"Scheduler crashed: {e}")
        sys.exit(1)
