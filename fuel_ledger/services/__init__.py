"""
Services.

Business logic layer.
"""

# Base Service Infrastructure
from fuel_ledger.services.base_service import (
    BaseService,
    log_operation,
    transaction,
)

# Reward Services
from fuel_ledger.services.rewards import (
    AwardResult,
    AwardStatus,
    BalanceReconciler,
    BalanceSnapshot,
    ReferralOutcome,
    ReferralStatus,
    RewardService,
    SpendResult,
    SpendStatus,
)


__all__ = [
    # Base Infrastructure
    "BaseService",
    "transaction",
    "log_operation",
    # Reward Services
    "RewardService",
    "BalanceReconciler",
    # Results
    "AwardResult",
    "AwardStatus",
    "BalanceSnapshot",
    "ReferralOutcome",
    "ReferralStatus",
    "SpendResult",
    "SpendStatus",
]
