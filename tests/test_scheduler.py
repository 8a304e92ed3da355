"""Tests for the periodic flush scheduler."""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from logrelay.scheduler import FlushScheduler


async def _wait_for_calls(mock, count, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while mock.await_count < count and loop.time() < deadline:
        await asyncio.sleep(0.005)


class TestFlushScheduler:
    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError, match="positive"):
            FlushScheduler(on_tick=AsyncMock(), interval=0)

    @pytest.mark.asyncio
    async def test_ticks_repeatedly(self):
        on_tick = AsyncMock()
        scheduler = FlushScheduler(on_tick=on_tick, interval=0.01)
        await scheduler.start()
        assert scheduler.running

        await _wait_for_calls(on_tick, 3)
        await scheduler.stop()

        assert on_tick.await_count >= 3
        assert not scheduler.running

    @pytest.mark.asyncio
    async def test_failing_tick_does_not_stop_the_loop(self, caplog):
        on_tick = AsyncMock(side_effect=RuntimeError("channel down"))
        scheduler = FlushScheduler(on_tick=on_tick, interval=0.01)

        with caplog.at_level(logging.ERROR, logger="logrelay.scheduler"):
            await scheduler.start()
            await _wait_for_calls(on_tick, 2)
            await scheduler.stop()

        assert on_tick.await_count >= 2
        assert "Scheduled flush failed: channel down" in caplog.text

    @pytest.mark.asyncio
    async def test_stop_cuts_sleep_short(self):
        on_tick = AsyncMock()
        scheduler = FlushScheduler(on_tick=on_tick, interval=60)
        await scheduler.start()

        await asyncio.wait_for(scheduler.stop(), timeout=1.0)

        on_tick.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stop_cancels_stuck_tick(self, caplog):
        started = asyncio.Event()

        async def stuck():
            started.set()
            await asyncio.sleep(10)

        scheduler = FlushScheduler(on_tick=stuck, interval=0.01)
        await scheduler.start()
        await asyncio.wait_for(started.wait(), timeout=1.0)

        with caplog.at_level(logging.WARNING, logger="logrelay.scheduler"):
            await asyncio.wait_for(scheduler.stop(timeout=0.05), timeout=1.0)

        assert "cancelling" in caplog.text

    @pytest.mark.asyncio
    async def test_start_twice_warns(self, caplog):
        scheduler = FlushScheduler(on_tick=AsyncMock(), interval=60)
        await scheduler.start()
        with caplog.at_level(logging.WARNING, logger="logrelay.scheduler"):
            await scheduler.start()
        await scheduler.stop()
        assert "already running" in caplog.text

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        await FlushScheduler(on_tick=AsyncMock()).stop()
