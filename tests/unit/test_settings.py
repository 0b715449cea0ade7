"""Unit tests for settings validation."""

import pytest
from pydantic import ValidationError

from fuel_ledger.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep test-session environment values out of explicit settings."""
    monkeypatch.delenv("PROMO_CODES", raising=False)


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "postgresql+asyncpg://ledger:secret@db/ledger",
        "environment": "development",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettingsValidation:
    """Test field and model validators."""

    def test_defaults(self):
        settings = make_settings()

        assert settings.daily_fuel_allowance == 20
        assert settings.free_pings_per_day == 4
        assert settings.referral_reward_amount == 10
        assert settings.lazy_provisioning is True
        assert settings.is_sqlite is False

    def test_rejects_sync_driver(self):
        with pytest.raises(ValidationError):
            make_settings(database_url="postgresql://ledger@db/ledger")

    def test_sqlite_allowed_outside_production(self):
        settings = make_settings(database_url="sqlite+aiosqlite:///ledger.db")

        assert settings.is_sqlite is True

    def test_production_forbids_sqlite(self):
        with pytest.raises(ValidationError):
            make_settings(
                database_url="sqlite+aiosqlite:///ledger.db", environment="production"
            )

    def test_production_forbids_debug(self):
        with pytest.raises(ValidationError):
            make_settings(environment="production", debug=True)

    def test_promo_amount_must_be_positive(self):
        with pytest.raises(ValidationError):
            make_settings(promo_codes={"FREE": 0})

    def test_promo_codes_accepted(self):
        settings = make_settings(promo_codes={"LAUNCH50": 50})

        assert settings.promo_codes == {"LAUNCH50": 50}

    def test_promo_codes_from_environment(self, monkeypatch):
        monkeypatch.setenv("PROMO_CODES", '{"BETA10": 10}')

        settings = make_settings()

        assert settings.promo_codes == {"BETA10": 10}
