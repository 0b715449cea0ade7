"""
HTTP API.

aiohttp application exposing the ledger operations.
"""

from fuel_ledger.api.app import create_app
from fuel_ledger.api.keys import CLOCK, SESSION_MAKER


__all__ = [
    "CLOCK",
    "SESSION_MAKER",
    "create_app",
]
