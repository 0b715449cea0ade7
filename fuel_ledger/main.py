"""
API entry point.

Runs the ledger HTTP API with aiohttp.
"""

import asyncio
import sys

from aiohttp import web
from loguru import logger

from fuel_ledger.api import create_app
from fuel_ledger.config.database import async_engine, async_session_maker
from fuel_ledger.config.logging import setup_logging
from fuel_ledger.config.settings import settings


async def main() -> None:
    """Initialize and run the API server until cancelled."""
    setup_logging("api")

    app = create_app(async_session_maker)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, settings.api_host, settings.api_port)
    await site.start()

    logger.info(f"Fuel ledger API listening on {settings.api_host}:{settings.api_port}")

    try:
        await asyncio.Event().wait()
    finally:
        logger.info("Shutting down API...")
        await runner.cleanup()
        await async_engine.dispose()


def run() -> None:
    """Console entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("API stopped by user (KeyboardInterrupt)")
    except Exception as e:
        logger.exception(f"API crashed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
