"""
Exception handling utilities.

Defines the ledger's exception types and the categories the HTTP layer
and the jobs use to decide how a failure is reported.
"""

from pydantic import ValidationError
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError


class LedgerError(Exception):
    """Base class for ledger errors caused by the caller."""

    code = "ledger_error"


class InvalidActionError(LedgerError):
    """Raised when an action id is not in the catalog."""

    code = "invalid_action"

    def __init__(self, action_id: str) -> None:
        super().__init__(f"Unknown action: {action_id}")
        self.action_id = action_id


class InvalidPromoCodeError(LedgerError):
    """Raised when a promo code is not configured."""

    code = "invalid_promo_code"

    def __init__(self) -> None:
        super().__init__("Invalid promo code")


class MalformedRequestError(LedgerError):
    """Raised when a request is missing data the operation needs."""

    code = "malformed_request"


class InvalidAmountError(LedgerError):
    """Raised when a ledger write is attempted with a non-positive amount."""

    code = "invalid_amount"


class BalanceNotFoundError(LedgerError):
    """Raised when a user has no active balance."""

    code = "balance_not_found"

    def __init__(self, user_id: str) -> None:
        super().__init__(f"Balance not found for user {user_id}")
        self.user_id = user_id


# Exception categories based on handling strategy

# Caller mistakes - reported as 4xx, never retried
CLIENT_ERRORS = (
    LedgerError,
    ValidationError,
)

# Storage contention / outage - safe to retry the whole request
RETRYABLE = (
    OperationalError,
    InterfaceError,
    PoolTimeoutError,
    ConnectionError,
)


def is_client_error(exc: Exception) -> bool:
    """
    Check if exception was caused by the caller.

    Args:
        exc: Exception to check

    Returns:
        True if the request itself was wrong
    """
    return isinstance(exc, CLIENT_ERRORS)


def is_retryable(exc: Exception) -> bool:
    """
    Check if exception is a transient storage failure.

    Args:
        exc: Exception to check

    Returns:
        True if retrying the whole operation is safe
    """
    return isinstance(exc, RETRYABLE)
