"""
Reward ledger services.

Contains the components of the fuel ledger:
- catalog: Reward rules, spend costs and promo codes
- idempotency_guard: One-time completion markers
- window_counter: Daily and monthly admission caps
- referral_attributor: Referral records and payouts
- ledger_core: The only writer of balances
- reward_service: Public operations, one transaction each
- reconciliation: Rebuilds balances from the transaction log
"""

from fuel_ledger.services.rewards.idempotency_guard import IdempotencyGuard
from fuel_ledger.services.rewards.ledger_core import (
    BalanceSnapshot,
    DebitResult,
    LedgerCore,
)
from fuel_ledger.services.rewards.reconciliation import (
    BalanceReconciler,
    ReconciliationReport,
)
from fuel_ledger.services.rewards.referral_attributor import (
    ReferralAttributor,
    ReferralOutcome,
    ReferralStatus,
)
from fuel_ledger.services.rewards.reward_service import (
    AwardResult,
    AwardStatus,
    ProvisionResult,
    RewardService,
    SpendResult,
    SpendStatus,
)
from fuel_ledger.services.rewards.window_counter import Admission, WindowCounter


__all__ = [
    # Components
    "IdempotencyGuard",
    "LedgerCore",
    "ReferralAttributor",
    "WindowCounter",
    # Orchestration
    "RewardService",
    "BalanceReconciler",
    # Results
    "Admission",
    "AwardResult",
    "AwardStatus",
    "BalanceSnapshot",
    "DebitResult",
    "ProvisionResult",
    "ReconciliationReport",
    "ReferralOutcome",
    "ReferralStatus",
    "SpendResult",
    "SpendStatus",
]
