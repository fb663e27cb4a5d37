"""
Scheduler tests: cycle outcomes, timeouts and the run loop.
"""

import asyncio
from datetime import datetime, time, timezone

import pytest

from worklio.core.exceptions import RefreshSourceError, StorageError
from worklio.main import stop_scheduler
from worklio.services.exchange_rate_scheduler import ExchangeRateScheduler, seconds_until


class FakeRefreshService:
    def __init__(self, result=13, error=None, delay=0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = 0

    async def refresh(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.mark.parametrize(
    "now, expected",
    [
        (datetime(2025, 10, 26, 1, 0, tzinfo=timezone.utc), 3600),
        (datetime(2025, 10, 26, 2, 0, tzinfo=timezone.utc), 86400),
        (datetime(2025, 10, 26, 2, 0, 30, tzinfo=timezone.utc), 86370),
        (datetime(2025, 10, 26, 23, 30, tzinfo=timezone.utc), 9000),
    ],
)
def test_seconds_until(now, expected):
    assert seconds_until(time(2, 0), now) == expected


@pytest.mark.asyncio
async def test_run_cycle_returns_updated_count():
    scheduler = ExchangeRateScheduler(FakeRefreshService(result=12))

    assert await scheduler.run_cycle() == 12


@pytest.mark.asyncio
async def test_run_cycle_times_out():
    service = FakeRefreshService(delay=5)
    scheduler = ExchangeRateScheduler(service, cycle_timeout=0.05)

    assert await scheduler.run_cycle() is None
    assert service.calls == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        RefreshSourceError("Rate provider returned status 500"),
        StorageError("Exchange rate storage failed"),
    ],
)
async def test_run_cycle_contains_expected_failures(error):
    scheduler = ExchangeRateScheduler(FakeRefreshService(error=error))

    assert await scheduler.run_cycle() is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        ConnectionRefusedError(111, "Connect call failed"),
        KeyError("EUR"),
    ],
)
async def test_run_cycle_contains_unexpected_errors(error):
    scheduler = ExchangeRateScheduler(FakeRefreshService(error=error))

    assert await scheduler.run_cycle() is None


class FlakyRefreshService(FakeRefreshService):
    """Fails the first cycle, succeeds afterwards."""

    async def refresh(self):
        self.calls += 1
        if self.calls == 1:
            raise ConnectionRefusedError(111, "Connect call failed")
        return self.result


@pytest.mark.asyncio
async def test_scheduled_cycle_runs_after_failed_startup():
    service = FlakyRefreshService()
    # 50ms before the scheduled time
    scheduler = ExchangeRateScheduler(
        service,
        run_at=time(2, 0),
        now=lambda: datetime(2025, 10, 26, 1, 59, 59, 950000, tzinfo=timezone.utc),
    )

    task = asyncio.create_task(scheduler.run())
    await asyncio.sleep(0.2)

    assert not task.done()
    scheduler.stop()
    await asyncio.wait_for(task, timeout=1)
    assert service.calls >= 2


@pytest.mark.asyncio
async def test_run_refreshes_on_startup_then_stops():
    service = FakeRefreshService()
    scheduler = ExchangeRateScheduler(
        service,
        run_at=time(2, 0),
        now=lambda: datetime(2025, 10, 26, 3, 0, tzinfo=timezone.utc),
    )

    task = asyncio.create_task(scheduler.run())
    await asyncio.sleep(0.05)
    scheduler.stop()
    await asyncio.wait_for(task, timeout=1)

    assert service.calls == 1


@pytest.mark.asyncio
async def test_startup_failure_keeps_loop_alive():
    service = FakeRefreshService(error=RefreshSourceError("unreachable"))
    scheduler = ExchangeRateScheduler(service)

    task = asyncio.create_task(scheduler.run())
    await asyncio.sleep(0.05)

    assert not task.done()
    scheduler.stop()
    await asyncio.wait_for(task, timeout=1)
    assert service.calls == 1


@pytest.mark.asyncio
async def test_daily_cycle_fires_when_due():
    service = FakeRefreshService()
    # 50ms before the scheduled time
    scheduler = ExchangeRateScheduler(
        service,
        run_at=time(2, 0),
        run_on_startup=False,
        now=lambda: datetime(2025, 10, 26, 1, 59, 59, 950000, tzinfo=timezone.utc),
    )

    task = asyncio.create_task(scheduler.run())
    await asyncio.sleep(0.2)
    scheduler.stop()
    await asyncio.wait_for(task, timeout=1)

    assert service.calls >= 1


@pytest.mark.asyncio
async def test_cancelled_while_sleeping():
    scheduler = ExchangeRateScheduler(FakeRefreshService(), run_on_startup=False)

    task = asyncio.create_task(scheduler.run())
    await asyncio.sleep(0.01)
    task.cancel()
    await asyncio.wait_for(task, timeout=1)

    assert task.done()


@pytest.mark.asyncio
async def test_stop_scheduler_tolerates_crashed_task():
    async def crashed():
        raise RuntimeError("scheduler crashed")

    task = asyncio.create_task(crashed())
    await asyncio.sleep(0)

    await stop_scheduler(ExchangeRateScheduler(FakeRefreshService()), task)

    assert task.done()
