"""
Tests for the periodic station directory refresh.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from core.scheduler import REFRESH_JOB_ID, Scheduler


class CountingDirectory:
    """Stands in for StationDirectory, counting refreshes."""

    def __init__(self):
        self.refreshes = 0

    async def refresh(self) -> bool:
        self.refreshes += 1
        return True


class TestScheduler:
    """Test Scheduler start/stop and job registration."""

    @pytest.mark.asyncio
    async def test_start_registers_daily_refresh(self):
        directory = CountingDirectory()
        scheduler = Scheduler(directory, interval_hours=24)

        scheduler.start()
        try:
            assert scheduler.scheduler.running
            job = scheduler.scheduler.get_job(REFRESH_JOB_ID)
            assert job is not None
            assert job.trigger.interval == timedelta(hours=24)

            next_run = datetime.fromisoformat(scheduler.get_next_run_time())
            assert next_run - datetime.now(timezone.utc) > timedelta(hours=23)
        finally:
            scheduler.shutdown()

        await asyncio.sleep(0)
        assert not scheduler.scheduler.running
        assert directory.refreshes == 0

    @pytest.mark.asyncio
    async def test_run_immediately(self):
        directory = CountingDirectory()
        scheduler = Scheduler(directory, interval_hours=24)

        scheduler.start(run_immediately=True)
        try:
            for _ in range(50):
                if directory.refreshes:
                    break
                await asyncio.sleep(0.02)
        finally:
            scheduler.shutdown()

        await asyncio.sleep(0)
        assert directory.refreshes == 1

    @pytest.mark.asyncio
    async def test_shutdown_is_idempotent(self):
        scheduler = Scheduler(CountingDirectory(), interval_hours=1)
        scheduler.start()

        with patch.object(scheduler.scheduler, "shutdown", wraps=scheduler.scheduler.shutdown) as stop:
            scheduler.shutdown()
            scheduler.shutdown()
            await asyncio.sleep(0)

        stop.assert_called_once_with(wait=False)
        assert not scheduler.scheduler.running
        assert scheduler.get_next_run_time("missing") is None

    def test_shutdown_before_start(self):
        scheduler = Scheduler(CountingDirectory(), interval_hours=1)

        scheduler.shutdown()

        assert not scheduler.scheduler.running
