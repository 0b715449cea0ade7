"""
Reward routes.

Each handler opens one session, runs one RewardService operation and
renders its typed result.
"""

from typing import Any

from aiohttp import web
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.api.keys import CLOCK, SESSION_MAKER
from fuel_ledger.api.middlewares import error_response
from fuel_ledger.api.schemas import (
    AwardRequest,
    AwardResponse,
    BalanceResponse,
    Balances,
    CapReachedResponse,
    DeactivateResponse,
    HistoryQuery,
    HistoryResponse,
    InsufficientFuelResponse,
    ProvisionRequest,
    ProvisionResponse,
    RedeemPromoRequest,
    RedeemReferralRequest,
    ReferralResponse,
    SpendRequest,
    SpendResponse,
    TransactionEntry,
)
from fuel_ledger.models.enums import PeriodKind
from fuel_ledger.services.rewards import (
    AwardResult,
    AwardStatus,
    ReferralStatus,
    RewardService,
    SpendStatus,
)
from fuel_ledger.utils.exceptions import MalformedRequestError

routes = web.RouteTableDef()


REJECTION_STATUS = {
    AwardStatus.INVALID_REFERRAL_CODE: 400,
    AwardStatus.ALREADY_REFERRED: 409,
    AwardStatus.SELF_REFERRAL: 409,
}

REFERRAL_REJECTION_STATUS = {
    ReferralStatus.INVALID_CODE: 400,
    ReferralStatus.ALREADY_REFERRED: 409,
    ReferralStatus.SELF_REFERRAL: 409,
}

CAP_MESSAGES = {
    PeriodKind.DAILY: "Daily limit reached, try again tomorrow",
    PeriodKind.MONTHLY: "Monthly limit reached, try again next month",
}


def _json(model: BaseModel, status: int = 200) -> web.Response:
    return web.json_response(model.to_json(), status=status)


async def _read_body(request: web.Request, schema: type[BaseModel]) -> Any:
    if not request.can_read_body:
        raise MalformedRequestError("Request body is required")
    payload = await request.json()
    if not isinstance(payload, dict):
        raise MalformedRequestError("Request body must be a JSON object")
    return schema.model_validate(payload)


def _service(request: web.Request, session: AsyncSession) -> RewardService:
    return RewardService(session, clock=request.app[CLOCK])


def _sessions(request: web.Request) -> AsyncSession:
    return request.app[SESSION_MAKER]()


def render_award(result: AwardResult) -> web.Response:
    """
    Render an award or promo result.

    Args:
        result: Service result

    Returns:
        200 for awarded / already completed, 4xx for rejections
    """
    if result.status is AwardStatus.CAP_REACHED:
        return _json(
            CapReachedResponse(
                period=result.cap_period,
                current=result.cap_current,
                max=result.cap_max,
                message=CAP_MESSAGES[result.cap_period],
            ),
            status=409,
        )
    if result.is_rejection:
        return error_response(REJECTION_STATUS[result.status], result.status.value)

    return _json(
        AwardResponse(
            awarded=result.awarded,
            pool=result.pool,
            balances=Balances.of(result.balances),
            already_completed=result.already_completed,
            referrer_id=result.referrer_id,
        )
    )


@routes.post("/rewards/award")
async def award(request: web.Request) -> web.Response:
    body = await _read_body(request, AwardRequest)
    async with _sessions(request) as session:
        result = await _service(request, session).award(
            body.user_id, body.action_id, body.metadata
        )
    return render_award(result)


@routes.post("/rewards/redeem-referral")
async def redeem_referral(request: web.Request) -> web.Response:
    body = await _read_body(request, RedeemReferralRequest)
    async with _sessions(request) as session:
        outcome = await _service(request, session).redeem_referral(
            body.referral_code, body.new_user_id
        )

    if outcome.is_rejection:
        return error_response(REFERRAL_REJECTION_STATUS[outcome.status], outcome.status.value)
    return _json(
        ReferralResponse(
            referrer_id=outcome.referrer_id,
            awarded=outcome.welcome_awarded,
            balances=Balances.of(outcome.balances),
        )
    )


@routes.get("/rewards/balance/{user_id}")
async def get_balance(request: web.Request) -> web.Response:
    user_id = request.match_info["user_id"]
    async with _sessions(request) as session:
        snapshot = await _service(request, session).get_balance(user_id)
    return _json(
        BalanceResponse(
            user_id=user_id,
            ephemeral=snapshot.ephemeral,
            permanent=snapshot.permanent,
            total=snapshot.total,
        )
    )


@routes.delete("/rewards/balance/{user_id}")
async def deactivate_balance(request: web.Request) -> web.Response:
    user_id = request.match_info["user_id"]
    async with _sessions(request) as session:
        await _service(request, session).deactivate(user_id)
    return _json(DeactivateResponse(user_id=user_id))


@routes.post("/rewards/spend")
async def spend(request: web.Request) -> web.Response:
    body = await _read_body(request, SpendRequest)
    async with _sessions(request) as session:
        result = await _service(request, session).spend(body.user_id, body.action_id)

    if result.status is SpendStatus.INSUFFICIENT_FUEL:
        return _json(
            InsufficientFuelResponse(
                required=result.cost,
                available=result.balances.total,
                balances=Balances.of(result.balances),
            ),
            status=402,
        )
    return _json(
        SpendResponse(
            charged=result.charged,
            free=result.status is SpendStatus.FREE,
            balances=Balances.of(result.balances),
            free_pings_remaining=result.free_remaining,
        )
    )


@routes.post("/rewards/redeem-promo")
async def redeem_promo(request: web.Request) -> web.Response:
    body = await _read_body(request, RedeemPromoRequest)
    async with _sessions(request) as session:
        result = await _service(request, session).redeem_promo(body.user_id, body.code)
    return render_award(result)


@routes.post("/rewards/provision")
async def provision(request: web.Request) -> web.Response:
    body = await _read_body(request, ProvisionRequest)
    async with _sessions(request) as session:
        result = await _service(request, session).provision(body.user_id)
    return _json(
        ProvisionResponse(
            user_id=result.user_id,
            referral_code=result.referral_code,
            balances=Balances.of(result.balances),
        )
    )


@routes.get("/rewards/transactions/{user_id}")
async def get_transactions(request: web.Request) -> web.Response:
    user_id = request.match_info["user_id"]
    query = HistoryQuery.model_validate(dict(request.query))
    async with _sessions(request) as session:
        records, total = await _service(request, session).get_history(
            user_id, limit=query.limit, offset=query.offset
        )
    return _json(
        HistoryResponse(
            user_id=user_id,
            total=total,
            entries=[TransactionEntry.of(record) for record in records],
        )
    )
