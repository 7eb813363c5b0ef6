"""Recurring timer handle on the running asyncio loop.

``Interval`` is the loop-level equivalent of a repeating timer: the callback
runs every ``interval_s`` seconds until ``cancel()`` is called. Each firing
re-arms the next one with ``loop.call_later``, so a tick always runs to
completion before the following one is scheduled.

Example::

    async def main():
        ticks = []
        handle = Interval(lambda: ticks.append(1), 0.1)
        await asyncio.sleep(0.35)
        handle.cancel()  # ticks == [1, 1, 1]
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any


class Interval:
    """Cancellable repeating timer.

    Args:
        callback: Zero-argument callable invoked on every tick.
        interval_s: Seconds between ticks. Must be > 0.
        loop: Event loop to schedule on. Defaults to the running loop, so
            construction outside a coroutine or loop callback raises
            RuntimeError.

    Exceptions raised by ``callback`` go to the loop's exception handler and
    do not stop the interval.
    """

    __slots__ = ("_callback", "_interval_s", "_loop", "_handle", "_cancelled", "_ticks")

    def __init__(
        self,
        callback: Callable[[], Any],
        interval_s: float,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if interval_s <= 0:
            raise ValueError(f"interval_s must be > 0, got {interval_s}")
        self._callback = callback
        self._interval_s = interval_s
        self._loop = loop or asyncio.get_running_loop()
        self._cancelled = False
        self._ticks = 0
        self._handle: asyncio.TimerHandle | None = self._loop.call_later(interval_s, self._fire)

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def ticks(self) -> int:
        """Number of times the callback has been invoked."""
        return self._ticks

    def _fire(self) -> None:
        if self._cancelled:
            return
        # Re-arm first so a raising callback keeps the schedule.
        self._handle = self._loop.call_later(self._interval_s, self._fire)
        self._ticks += 1
        self._callback()

    def cancel(self) -> None:
        """Stop the interval. Safe to call more than once."""
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"Interval({self._interval_s}s, {state}, ticks={self._ticks})"
