"""
Request and response schemas.

JSON bodies use camelCase keys; Python code uses snake_case.
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fuel_ledger.models.credit_transaction import CreditTransaction
from fuel_ledger.models.enums import FuelPool, PeriodKind
from fuel_ledger.services.rewards.ledger_core import BalanceSnapshot


UserId = Annotated[str, Field(min_length=1, max_length=64)]
ActionId = Annotated[str, Field(min_length=1, max_length=64)]


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


# Requests

class AwardRequest(CamelModel):
    user_id: UserId
    action_id: ActionId
    metadata: dict[str, Any] | None = None


class RedeemReferralRequest(CamelModel):
    referral_code: str = Field(min_length=1, max_length=32)
    new_user_id: UserId


class SpendRequest(CamelModel):
    user_id: UserId
    action_id: ActionId


class RedeemPromoRequest(CamelModel):
    user_id: UserId
    code: str = Field(min_length=1, max_length=64)


class ProvisionRequest(CamelModel):
    user_id: UserId


class HistoryQuery(CamelModel):
    limit: int = Field(default=50, ge=1, le=200)
    offset: int = Field(default=0, ge=0)


# Responses

class Balances(CamelModel):
    ephemeral: int
    permanent: int

    @classmethod
    def of(cls, snapshot: BalanceSnapshot) -> "Balances":
        return cls(ephemeral=snapshot.ephemeral, permanent=snapshot.permanent)


class AwardResponse(CamelModel):
    awarded: int
    pool: FuelPool
    balances: Balances
    already_completed: bool = False
    referrer_id: str | None = None


class CapReachedResponse(CamelModel):
    error: str = "cap_reached"
    period: PeriodKind
    current: int
    max: int
    message: str


class ErrorResponse(CamelModel):
    error: str
    message: str | None = None
    retryable: bool | None = None
    details: list[dict[str, Any]] | None = None


class ReferralResponse(CamelModel):
    referrer_id: str
    awarded: int
    balances: Balances


class BalanceResponse(CamelModel):
    user_id: str
    ephemeral: int
    permanent: int
    total: int


class SpendResponse(CamelModel):
    charged: int
    free: bool
    balances: Balances
    free_pings_remaining: int | None = None


class InsufficientFuelResponse(CamelModel):
    error: str = "insufficient_fuel"
    required: int
    available: int
    balances: Balances


class ProvisionResponse(CamelModel):
    user_id: str
    referral_code: str
    balances: Balances


class DeactivateResponse(CamelModel):
    user_id: str
    active: bool = False


class TransactionEntry(CamelModel):
    id: int
    amount: int
    pool: FuelPool
    action_type: str
    description: str
    created_at: datetime

    @classmethod
    def of(cls, record: CreditTransaction) -> "TransactionEntry":
        return cls(
            id=record.id,
            amount=record.amount,
            pool=FuelPool(record.pool),
            action_type=record.action_type,
            description=record.description,
            created_at=record.created_at,
        )


class HistoryResponse(CamelModel):
    user_id: str
    total: int
    entries: list[TransactionEntry]
