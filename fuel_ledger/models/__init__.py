"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from fuel_ledger.models.balance_correction import BalanceCorrection
from fuel_ledger.models.base import Base
from fuel_ledger.models.completion_marker import CompletionMarker
from fuel_ledger.models.credit_transaction import CreditTransaction
from fuel_ledger.models.enums import FuelPool, PeriodKind
from fuel_ledger.models.referral import Referral
from fuel_ledger.models.user_balance import UserBalance
from fuel_ledger.models.window_count import WindowCount

__all__ = [
    # Base
    "Base",
    # Enums
    "FuelPool",
    "PeriodKind",
    # Balances
    "UserBalance",
    "CreditTransaction",
    "BalanceCorrection",
    # Admission gates
    "CompletionMarker",
    "WindowCount",
    "Referral",
]
