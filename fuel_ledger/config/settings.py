"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/fuel_ledger.log"

    # HTTP API
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=8000, ge=1, le=65535)
    health_check_port: int = Field(
        default=8081, ge=1, le=65535, description="Jobs health check HTTP server port"
    )

    # Balances
    lazy_provisioning: bool = Field(
        default=True,
        description="Create a user's balance on first reward instead of answering 404",
    )
    daily_fuel_allowance: int = Field(
        default=20, ge=0, description="Ephemeral pool value after the daily refill"
    )
    free_pings_per_day: int = Field(
        default=4, ge=0, description="Pings per user per day that cost no fuel"
    )

    # Referrals
    referral_reward_amount: int = Field(
        default=10, gt=0, description="Permanent fuel paid to the referrer"
    )
    referral_welcome_amount: int = Field(
        default=10, ge=0, description="Permanent fuel paid to the referred user (0 disables)"
    )
    referral_code_length: int = Field(default=8, ge=6, le=32)

    # Promo codes: JSON object {"CODE": amount}
    promo_codes: dict[str, int] = Field(default_factory=dict)

    # Redis (for Dramatiq)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Reconciliation job
    reconciliation_hour_utc: int = Field(default=3, ge=0, le=23)
    reconciliation_batch_size: int = Field(default=500, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
            raise ValueError(
                "DATABASE_URL must start with postgresql+asyncpg:// or sqlite+aiosqlite://"
            )
        return v

    @field_validator("promo_codes")
    @classmethod
    def validate_promo_codes(cls, v: dict[str, int]) -> dict[str, int]:
        """Promo amounts must be positive."""
        for code, amount in v.items():
            if amount <= 0:
                raise ValueError(f"Promo code {code[:4]}*** must award a positive amount")
        return v

    @model_validator(mode="after")
    def validate_production(self) -> "Settings":
        """Validate production-specific requirements."""
        if self.environment == "production":
            if self.debug:
                raise ValueError(
                    "DEBUG must be False in production environment. "
                    "Set DEBUG=false in your .env file."
                )
            if self.database_url.startswith("sqlite"):
                raise ValueError(
                    "SQLite cannot serve concurrent ledger writers in production. "
                    "Point DATABASE_URL at PostgreSQL."
                )
        return self

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured store is SQLite."""
        return self.database_url.startswith("sqlite")


# Global settings instance
settings = Settings()
