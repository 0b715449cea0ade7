"""
Datetime utilities.

Provides timezone-aware datetime functions and the calendar period keys
used by capped reward windows and the daily fuel refill.
"""

from collections.abc import Callable
from datetime import UTC, datetime


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def day_key(moment: datetime) -> str:
    """
    Calendar date key in UTC, e.g. ``2026-10-17``.

    Args:
        moment: Point in time (naive values are treated as UTC)

    Returns:
        ISO date string
    """
    return _as_utc(moment).strftime("%Y-%m-%d")


def month_key(moment: datetime) -> str:
    """
    Calendar year-month key in UTC, e.g. ``2026-10``.

    Args:
        moment: Point in time (naive values are treated as UTC)

    Returns:
        Year-month string
    """
    return _as_utc(moment).strftime("%Y-%m")


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)
