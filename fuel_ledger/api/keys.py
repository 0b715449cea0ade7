"""
Application state keys.
"""

from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fuel_ledger.utils.datetime_utils import Clock

SESSION_MAKER = web.AppKey("session_maker", async_sessionmaker[AsyncSession])
CLOCK = web.AppKey("clock", Clock)
