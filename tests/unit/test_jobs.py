"""
Unit tests for the scheduler process.

Tests cover:
- Scheduler health endpoint
- Registered periodic jobs
"""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from jobs.health import HEALTH_SCHEDULER, health_handler, liveness_handler


@pytest.fixture
def scheduler():
    """Mock scheduler with one job."""
    job = MagicMock()
    job.id = "balance_reconciliation"
    job.name = "Balance reconciliation"
    job.next_run_time = datetime(2026, 10, 18, 3, 0, tzinfo=UTC)

    scheduler = MagicMock()
    scheduler.running = True
    scheduler.get_jobs.return_value = [job]
    return scheduler


@pytest_asyncio.fixture
async def client(scheduler):
    """Test client for the health app."""
    app = web.Application()
    app[HEALTH_SCHEDULER] = scheduler
    app.router.add_get("/health", health_handler)
    app.router.add_get("/liveness", liveness_handler)
    async with TestClient(TestServer(app)) as client:
        yield client


class TestHealthServer:
    """Test scheduler probes."""

    @pytest.mark.asyncio
    async def test_running_scheduler(self, client):
        response = await client.get("/health")

        assert response.status == 200
        body = await response.json()
        assert body["status"] == "healthy"
        assert body["jobs_count"] == 1
        assert body["jobs"][0]["next_run_time"] == "2026-10-18T03:00:00+00:00"

    @pytest.mark.asyncio
    async def test_stopped_scheduler(self, client, scheduler):
        scheduler.running = False

        response = await client.get("/health")

        assert response.status == 503
        assert (await response.json())["status"] == "stopped"

    @pytest.mark.asyncio
    async def test_liveness(self, client):
        response = await client.get("/liveness")

        assert response.status == 200


class TestScheduler:
    """Test job registration."""

    def test_reconciliation_job_registered(self):
        from jobs.scheduler import create_scheduler

        scheduler = create_scheduler()

        job = scheduler.get_job("balance_reconciliation")
        assert job is not None
        assert job.name == "Balance reconciliation"
        assert job.max_instances == 1
