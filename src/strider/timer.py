"""Cancellable one-second duration tickers.

Both timers share the same small surface -- ``start(on_tick)``,
``cancel()`` and ``active`` -- so the engine does not care whether time
comes from a running event loop or from recorded sample timestamps.

Starting always cancels the previous ticker first, so at most one is
live.  ``cancel()`` is synchronous and idempotent: once it returns, the
callback will not run again.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from strider.config import TICK_INTERVAL_SEC

TickCallback = Callable[[], None]


class DurationTimer:
    """Periodic ticker on an asyncio event loop.

    Deadlines are anchored to the start time (``call_at``) rather than
    re-armed relative to the previous callback, so slow handlers do not
    accumulate drift.
    """

    def __init__(
        self,
        interval: float = TICK_INTERVAL_SEC,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.interval = interval
        self._injected_loop = loop
        self._loop: asyncio.AbstractEventLoop | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._on_tick: TickCallback | None = None
        self._deadline = 0.0

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self, on_tick: TickCallback) -> None:
        """Begin ticking.  Must be called with a running loop unless one was given."""
        self.cancel()
        # Resolved on every start so one timer can outlive an event loop.
        loop = self._injected_loop or asyncio.get_running_loop()
        self._loop = loop
        self._on_tick = on_tick
        self._deadline = loop.time() + self.interval
        self._handle = loop.call_at(self._deadline, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._on_tick = None

    def _fire(self) -> None:
        on_tick = self._on_tick
        if on_tick is None or self._loop is None:
            return
        # Arm the next deadline before ticking so a cancel() from inside
        # the callback also cancels it.
        self._deadline += self.interval
        self._handle = self._loop.call_at(self._deadline, self._fire)
        on_tick()


class ManualTimer:
    """Ticker driven by explicit ``advance(seconds)`` calls.

    Used to replay recordings on their own clock.  Fractional seconds
    carry over between calls; a tick fires each time a full interval has
    accumulated.
    """

    def __init__(self, interval: float = TICK_INTERVAL_SEC) -> None:
        self.interval = interval
        self._on_tick: TickCallback | None = None
        self._carry = 0.0

    @property
    def active(self) -> bool:
        return self._on_tick is not None

    def start(self, on_tick: TickCallback) -> None:
        self.cancel()
        self._on_tick = on_tick

    def cancel(self) -> None:
        self._on_tick = None
        self._carry = 0.0

    def advance(self, seconds: float) -> int:
        """Move time forward, firing due ticks.  Returns the number fired."""
        if self._on_tick is None or seconds <= 0:
            return 0
        self._carry += seconds
        fired = 0
        while self._on_tick is not None and self._carry >= self.interval:
            self._carry -= self.interval
            fired += 1
            self._on_tick()
        return fired
