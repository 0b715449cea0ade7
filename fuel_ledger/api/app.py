"""
Application factory.

Builds the aiohttp application serving the reward routes plus health
and liveness probes.
"""

from aiohttp import web
from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fuel_ledger import __version__
from fuel_ledger.api.keys import CLOCK, SESSION_MAKER
from fuel_ledger.api.middlewares import error_middleware
from fuel_ledger.api.routes import routes
from fuel_ledger.utils.datetime_utils import Clock, utc_now


async def health_handler(request: web.Request) -> web.Response:
    """
    Health check endpoint.

    Returns:
        JSON response with database status
    """
    try:
        async with request.app[SESSION_MAKER]() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return web.json_response(
            {
                "status": "unhealthy",
                "database": "unavailable",
            },
            status=503,
        )

    return web.json_response(
        {
            "status": "healthy",
            "database": "ok",
            "version": __version__,
        }
    )


async def liveness_handler(request: web.Request) -> web.Response:
    """
    Liveness check endpoint.

    Returns:
        JSON response indicating if the process is alive
    """
    return web.json_response(
        {
            "status": "alive",
            "alive": True,
        }
    )


def create_app(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    clock: Clock = utc_now,
) -> web.Application:
    """
    Create the ledger web application.

    Args:
        session_maker: Session factory (defaults to the configured database)
        clock: Source of the current time

    Returns:
        Configured application
    """
    if session_maker is None:
        from fuel_ledger.config.database import async_session_maker

        session_maker = async_session_maker

    app = web.Application(middlewares=[error_middleware])
    app[SESSION_MAKER] = session_maker
    app[CLOCK] = clock

    app.add_routes(routes)
    app.router.add_get("/health", health_handler)
    app.router.add_get("/liveness", liveness_handler)
    return app
