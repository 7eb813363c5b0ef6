"""Timer leak: recurring timers that are started and never cancelled.

Each ``start()`` installs one more interval. Its callback allocates a 5 MiB
buffer that is dropped right away and reclaimed; what leaks is the timer
handle and its closure, kept alive both by the loop and by ``_timers``.
Unlike the other engines there is no "already running" guard: calling
``start()`` again is how the leak grows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from leaklab.core.interval import Interval
from leaklab.patterns.base import LeakEngine, LeakResponse, LeakStats

logger = logging.getLogger(__name__)

TRANSIENT_BUFFER_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class TimerLeakStats(LeakStats):
    active_timers: int
    is_leaking: bool

    @property
    def count(self) -> int:
        return self.active_timers

    @property
    def estimated_memory(self) -> float:
        # The leak is the handles themselves, not a sized payload.
        return 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"activeTimers": self.active_timers, "isLeaking": self.is_leaking}


class TimerLeak(LeakEngine):
    name = "timer"
    started_message = "Timer leak started - timeout objects will accumulate in memory"
    stopped_message = "All timer leaks stopped - cleared {cleared} timeout objects"
    running_message = "Currently {count} timeout object(s) leaked in memory"
    idle_message = running_message

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._timers: list[Interval] = []

    @property
    def is_leaking(self) -> bool:
        return bool(self._timers)

    @property
    def count(self) -> int:
        return len(self._timers)

    def _tick(self) -> None:
        bytearray(TRANSIENT_BUFFER_BYTES)
        logger.debug(
            "Timer leak: allocated 5MB buffer (will be reclaimed), timer count: %d",
            len(self._timers),
        )

    def start(self) -> LeakResponse:
        self._timers.append(Interval(self._tick, self._interval_ms / 1000))
        logger.info("[%s] Timer leak started. Active timers: %d", self.name, len(self._timers))
        return LeakResponse(self.started_message, self.status())

    def _clear(self) -> int:
        for timer in self._timers:
            timer.cancel()
        cleared = len(self._timers)
        self._timers.clear()
        return cleared

    def status(self) -> TimerLeakStats:
        return TimerLeakStats(active_timers=len(self._timers), is_leaking=self.is_leaking)


timer_leak = TimerLeak()
