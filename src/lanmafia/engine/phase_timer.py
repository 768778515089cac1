"""Phase timers.

Each phase instance owns at most one timer. A timer never touches session
state itself: on expiry (and on every tick) it calls back with the
generation it was started for, and the controller turns that into a queued
message. Cancelling is synchronous, so once cancel() returns the timer will
not call back again.

Two implementations:
- AsyncioTimerFactory: real timers on the running event loop
- ManualTimerFactory: deterministic timers fired explicitly (tests, the
  instant simulation mode of the CLI)
"""

import asyncio
import math
from typing import Callable, Optional, Protocol

ExpireCallback = Callable[[int], None]  # generation
TickCallback = Callable[[int, int], None]  # generation, seconds remaining


class PhaseTimer(Protocol):
    """Handle on a running phase timer."""

    generation: int
    duration: float

    @property
    def cancelled(self) -> bool:
        ...

    def cancel(self) -> None:
        ...

    def remaining(self) -> int:
        """Whole seconds left (rounded up)."""
        ...


class TimerFactory(Protocol):
    """Starts phase timers."""

    def start(
        self,
        duration: float,
        generation: int,
        on_expire: ExpireCallback,
        on_tick: Optional[TickCallback] = None,
    ) -> PhaseTimer:
        ...


# ============================================================================
# asyncio
# ============================================================================


class AsyncioTimer:
    """Timer driven by loop.call_later, with optional per-interval ticks."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        duration: float,
        generation: int,
        on_expire: ExpireCallback,
        on_tick: Optional[TickCallback] = None,
        tick_interval: float = 1.0,
    ):
        self.generation = generation
        self.duration = duration
        self._loop = loop
        self._deadline = loop.time() + duration
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._tick_interval = tick_interval
        self._cancelled = False
        self._expire_handle = loop.call_later(duration, self._expire)
        self._tick_handle: Optional[asyncio.TimerHandle] = None
        if on_tick is not None and tick_interval > 0:
            self._schedule_tick()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def remaining(self) -> int:
        return max(0, math.ceil(self._deadline - self._loop.time()))

    def cancel(self) -> None:
        self._cancelled = True
        self._expire_handle.cancel()
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _schedule_tick(self) -> None:
        delay = min(self._tick_interval, max(0.0, self._deadline - self._loop.time()))
        self._tick_handle = self._loop.call_later(delay, self._tick)

    def _tick(self) -> None:
        if self._cancelled:
            return
        remaining = self.remaining()
        if remaining <= 0:
            return
        self._on_tick(self.generation, remaining)
        self._schedule_tick()

    def _expire(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._tick_handle is not None:
            self._tick_handle.cancel()
        self._on_expire(self.generation)


class AsyncioTimerFactory:
    """Starts AsyncioTimers on the running loop."""

    def __init__(self, tick_interval: float = 1.0):
        self.tick_interval = tick_interval

    def start(
        self,
        duration: float,
        generation: int,
        on_expire: ExpireCallback,
        on_tick: Optional[TickCallback] = None,
    ) -> AsyncioTimer:
        loop = asyncio.get_running_loop()
        return AsyncioTimer(
            loop,
            duration,
            generation,
            on_expire,
            on_tick=on_tick,
            tick_interval=self.tick_interval,
        )


# ============================================================================
# Manual
# ============================================================================


class ManualTimer:
    """Timer that only fires when told to."""

    def __init__(
        self,
        duration: float,
        generation: int,
        on_expire: ExpireCallback,
        on_tick: Optional[TickCallback] = None,
    ):
        self.generation = generation
        self.duration = duration
        self.elapsed = 0.0
        self.fired = False
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> bool:
        return not self._cancelled and not self.fired

    def remaining(self) -> int:
        return max(0, math.ceil(self.duration - self.elapsed))

    def cancel(self) -> None:
        self._cancelled = True

    def advance(self, seconds: float) -> None:
        """Move time forward, ticking once and firing when the time is up."""
        if not self.pending:
            return
        self.elapsed += seconds
        if self.elapsed >= self.duration:
            self.fire()
        elif self._on_tick is not None:
            self._on_tick(self.generation, self.remaining())

    def fire(self, force: bool = False) -> bool:
        """Fire the expiry callback.

        Args:
            force: Fire even if cancelled or already fired. Used to
                simulate a late expiry racing a completed phase.

        Returns:
            True if the callback ran.
        """
        if not force and not self.pending:
            return False
        self.fired = True
        self.elapsed = max(self.elapsed, self.duration)
        self._on_expire(self.generation)
        return True


class ManualTimerFactory:
    """Creates ManualTimers and remembers them for the test to drive."""

    def __init__(self):
        self.timers: list[ManualTimer] = []

    def start(
        self,
        duration: float,
        generation: int,
        on_expire: ExpireCallback,
        on_tick: Optional[TickCallback] = None,
    ) -> ManualTimer:
        timer = ManualTimer(duration, generation, on_expire, on_tick)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> Optional[ManualTimer]:
        """The most recent timer that has neither fired nor been cancelled."""
        pending = [t for t in self.timers if t.pending]
        return pending[-1] if pending else None

    def fire_next(self) -> Optional[ManualTimer]:
        """Fire the active timer, if any."""
        timer = self.active
        if timer is not None:
            timer.fire()
        return timer
