"""Unit tests for calendar period keys."""

from datetime import UTC, datetime, timedelta, timezone

from fuel_ledger.models.enums import PeriodKind
from fuel_ledger.services.rewards.window_counter import period_key_for
from fuel_ledger.utils.datetime_utils import day_key, month_key, utc_now


class TestPeriodKeys:
    """Test day and month keys."""

    def test_day_key(self):
        assert day_key(datetime(2026, 3, 9, 23, 59, tzinfo=UTC)) == "2026-03-09"

    def test_month_key(self):
        assert month_key(datetime(2026, 3, 9, tzinfo=UTC)) == "2026-03"

    def test_naive_datetime_treated_as_utc(self):
        assert day_key(datetime(2026, 12, 31, 23, 0)) == "2026-12-31"

    def test_offset_converted_to_utc(self):
        # 23:30 at UTC-2 is already the next day (and month) in UTC
        moment = datetime(2026, 10, 31, 23, 30, tzinfo=timezone(timedelta(hours=-2)))

        assert day_key(moment) == "2026-11-01"
        assert month_key(moment) == "2026-11"

    def test_period_key_for(self):
        moment = datetime(2026, 10, 17, 8, 0, tzinfo=UTC)

        assert period_key_for(PeriodKind.DAILY, moment) == "2026-10-17"
        assert period_key_for(PeriodKind.MONTHLY, moment) == "2026-10"

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo is not None
