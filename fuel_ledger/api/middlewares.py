"""
HTTP middlewares.

Maps exceptions raised by handlers to JSON error responses.
"""

import json

from aiohttp import web
from loguru import logger
from pydantic import ValidationError

from fuel_ledger.api.schemas import ErrorResponse
from fuel_ledger.utils.exceptions import (
    RETRYABLE,
    BalanceNotFoundError,
    LedgerError,
)


def error_response(status: int, error: str, **fields) -> web.Response:
    """
    Build a JSON error response.

    Args:
        status: HTTP status
        error: Machine-readable error code
        **fields: Extra ErrorResponse fields

    Returns:
        JSON response
    """
    body = ErrorResponse(error=error, **fields)
    return web.json_response(body.to_json(), status=status)


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """
    Convert exceptions to error responses.

    Client errors become 4xx, transient storage failures 503 with
    ``retryable`` set, anything else 500.
    """
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except BalanceNotFoundError as e:
        return error_response(404, e.code, message=str(e))
    except ValidationError as e:
        details = [
            {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
            for err in e.errors()
        ]
        return error_response(400, "malformed_request", details=details)
    except json.JSONDecodeError:
        return error_response(400, "malformed_request", message="Body must be JSON")
    except LedgerError as e:
        return error_response(400, e.code, message=str(e))
    except RETRYABLE as e:
        logger.warning(
            f"Storage unavailable: {type(e).__name__}",
            extra={"path": request.path, "error": str(e)},
        )
        return error_response(503, "storage_unavailable", retryable=True)
    except Exception as e:
        logger.exception(
            f"Unhandled error on {request.method} {request.path}: {e}"
        )
        return error_response(500, "internal_error")
