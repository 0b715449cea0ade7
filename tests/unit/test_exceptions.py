"""Unit tests for exception categories."""

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError

from fuel_ledger.utils.exceptions import (
    BalanceNotFoundError,
    InvalidActionError,
    is_client_error,
    is_retryable,
)


class Payload(BaseModel):
    amount: int


def validation_error() -> ValidationError:
    try:
        Payload.model_validate({"amount": "lots"})
    except ValidationError as e:
        return e
    raise AssertionError("payload unexpectedly valid")


class TestCategories:
    """Test client vs retryable classification."""

    def test_ledger_errors_are_client_errors(self):
        assert is_client_error(InvalidActionError("x"))
        assert is_client_error(BalanceNotFoundError("u1"))
        assert is_client_error(validation_error())

    def test_operational_error_is_retryable(self):
        error = OperationalError("SELECT 1", {}, Exception("database is locked"))

        assert is_retryable(error)
        assert not is_client_error(error)

    def test_integrity_error_is_not_retryable(self):
        error = IntegrityError("INSERT", {}, Exception("CHECK constraint failed"))

        assert not is_retryable(error)

    def test_connection_error_is_retryable(self):
        assert is_retryable(ConnectionRefusedError())

    def test_balance_not_found_message(self):
        error = BalanceNotFoundError("u1")

        assert error.user_id == "u1"
        assert "u1" in str(error)
