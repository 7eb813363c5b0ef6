"""Closure leak: functions that capture a large buffer and are never dropped."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from leaklab.patterns.base import LeakEngine, LeakStats

logger = logging.getLogger(__name__)

MB_PER_CLOSURE = 10
BUFFER_BYTES = MB_PER_CLOSURE * 1024 * 1024


@dataclass(frozen=True)
class ClosureLeakStats(LeakStats):
    active_closures: int
    total_memory_allocated: int
    is_leaking: bool

    @property
    def count(self) -> int:
        return self.active_closures

    @property
    def estimated_memory(self) -> float:
        return self.total_memory_allocated

    def to_dict(self) -> dict[str, Any]:
        return {
            "activeClosures": self.active_closures,
            "totalMemoryAllocated": self.total_memory_allocated,
            "isLeaking": self.is_leaking,
        }


def create_leaker() -> Callable[[], int]:
    huge_buffer = bytearray(BUFFER_BYTES)

    def leaker() -> int:
        logger.debug("Holding buffer of size: %d", len(huge_buffer))
        return len(huge_buffer)

    return leaker


class ClosureLeak(LeakEngine):
    name = "closure"
    started_message = "Closure leak started"
    already_running_message = "Closure leak already running"
    stopped_message = "Closure leak stopped, cleared {cleared} closures"
    running_message = "Closure leak is running"
    idle_message = "Closure leak is not running"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._leakers: list[Callable[[], int]] = []

    @property
    def count(self) -> int:
        return len(self._leakers)

    def _tick(self) -> None:
        self._leakers.append(create_leaker())
        logger.debug("Closure leak: created closure, total: %d", len(self._leakers))

    def _clear(self) -> int:
        cleared = len(self._leakers)
        self._leakers.clear()
        return cleared

    def status(self) -> ClosureLeakStats:
        active = len(self._leakers)
        return ClosureLeakStats(
            active_closures=active,
            total_memory_allocated=active * MB_PER_CLOSURE,
            is_leaking=self.is_leaking,
        )


closure_leak = ClosureLeak()
