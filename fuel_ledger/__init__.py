"""
Fuel ledger.

Reward ledger issuing platform credit ("fuel") for user actions with
idempotent one-time rewards, capped recurring rewards, referral
attribution and a reconstructible balance.
"""

__version__ = "1.0.0"
