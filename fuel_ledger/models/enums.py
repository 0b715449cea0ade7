"""
Enumerations shared by ledger models and services.
"""

from enum import StrEnum


class FuelPool(StrEnum):
    """Balance bucket a transaction affects."""

    EPHEMERAL = "ephemeral"  # Refilled daily, spent first
    PERMANENT = "permanent"  # Never expires


class PeriodKind(StrEnum):
    """Calendar window a capped action is counted in."""

    DAILY = "daily"
    MONTHLY = "monthly"
