"""Tests for phase timers."""

import asyncio

import pytest

from lanmafia.engine import AsyncioTimerFactory, ManualTimerFactory


class Recorder:
    def __init__(self):
        self.expired: list[int] = []
        self.ticks: list[tuple[int, int]] = []

    def on_expire(self, generation: int) -> None:
        self.expired.append(generation)

    def on_tick(self, generation: int, remaining: int) -> None:
        self.ticks.append((generation, remaining))


class TestManualTimer:
    """ManualTimer only fires when driven."""

    def test_fire_once(self) -> None:
        rec = Recorder()
        timer = ManualTimerFactory().start(30, 4, rec.on_expire)

        assert timer.fire()
        assert not timer.fire()
        assert rec.expired == [4]

    def test_cancelled_timer_does_not_fire(self) -> None:
        rec = Recorder()
        timer = ManualTimerFactory().start(30, 1, rec.on_expire)
        timer.cancel()

        assert not timer.fire()
        assert rec.expired == []

    def test_forced_fire_after_cancel(self) -> None:
        rec = Recorder()
        timer = ManualTimerFactory().start(30, 1, rec.on_expire)
        timer.cancel()
        assert timer.fire(force=True)
        assert rec.expired == [1]

    def test_advance_ticks_then_expires(self) -> None:
        rec = Recorder()
        timer = ManualTimerFactory().start(3, 2, rec.on_expire, rec.on_tick)

        timer.advance(1)
        timer.advance(1)
        assert rec.ticks == [(2, 2), (2, 1)]
        assert timer.remaining() == 1

        timer.advance(1)
        assert rec.expired == [2]
        assert timer.remaining() == 0

    def test_factory_tracks_active(self) -> None:
        rec = Recorder()
        factory = ManualTimerFactory()
        first = factory.start(10, 1, rec.on_expire)
        second = factory.start(10, 2, rec.on_expire)
        assert factory.active is second

        second.cancel()
        assert factory.active is first
        assert factory.fire_next() is first
        assert factory.active is None
        assert factory.fire_next() is None


class TestAsyncioTimer:
    """AsyncioTimer runs on the event loop."""

    @pytest.mark.asyncio
    async def test_expires(self) -> None:
        rec = Recorder()
        AsyncioTimerFactory(tick_interval=0).start(0.05, 7, rec.on_expire)
        await asyncio.sleep(0.15)
        assert rec.expired == [7]

    @pytest.mark.asyncio
    async def test_cancel_is_synchronous(self) -> None:
        rec = Recorder()
        timer = AsyncioTimerFactory(tick_interval=0).start(0.05, 1, rec.on_expire)
        timer.cancel()
        await asyncio.sleep(0.1)
        assert rec.expired == []
        assert timer.cancelled

    @pytest.mark.asyncio
    async def test_ticks_before_expiry(self) -> None:
        rec = Recorder()
        AsyncioTimerFactory(tick_interval=0.02).start(0.1, 3, rec.on_expire, rec.on_tick)
        await asyncio.sleep(0.2)

        assert rec.expired == [3]
        assert rec.ticks
        assert all(generation == 3 for generation, _ in rec.ticks)

    @pytest.mark.asyncio
    async def test_remaining_rounds_up(self) -> None:
        rec = Recorder()
        timer = AsyncioTimerFactory(tick_interval=0).start(2.5, 1, rec.on_expire)
        assert timer.remaining() == 3
        timer.cancel()
