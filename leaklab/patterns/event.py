"""Event listener leak.

A listener closing over a ~8 MB list is added to a shared emitter every
tick and never removed. The emitter keeps every listener, and with it every
captured list, reachable.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from leaklab.patterns.base import LeakEngine, LeakStats
from leaklab.patterns.emitter import EventEmitter

logger = logging.getLogger(__name__)

EVENT_NAME = "data"
MB_PER_LISTENER = 8
PAYLOAD_LENGTH = 1_000_000


@dataclass(frozen=True)
class EventLeakStats(LeakStats):
    active_listeners: int
    total_memory_allocated: int
    is_leaking: bool

    @property
    def count(self) -> int:
        return self.active_listeners

    @property
    def estimated_memory(self) -> float:
        return self.total_memory_allocated

    def to_dict(self) -> dict[str, Any]:
        return {
            "activeListeners": self.active_listeners,
            "totalMemoryAllocated": self.total_memory_allocated,
            "isLeaking": self.is_leaking,
        }


def create_listener() -> Callable[..., None]:
    big_data = ["event"] * PAYLOAD_LENGTH

    def listener(*_args: Any) -> None:
        logger.debug("Big data length: %d", len(big_data))

    return listener


class EventLeak(LeakEngine):
    """Listener-accumulation leak on a shared ``EventEmitter``.

    Args:
        emitter: Emitter to attach listeners to. Defaults to a fresh one.
        interval_ms: Milliseconds between added listeners.
    """

    name = "event"
    started_message = "Event leak started - listeners will accumulate"
    already_running_message = "Event leak was already running"
    stopped_message = "Event leak stopped, removed {cleared} listeners"
    running_message = "Event leak is running"
    idle_message = "Event leak is not running"

    def __init__(self, *, emitter: EventEmitter | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.emitter = emitter if emitter is not None else EventEmitter()

    @property
    def count(self) -> int:
        return self.emitter.listener_count(EVENT_NAME)

    def _tick(self) -> None:
        self.emitter.on(EVENT_NAME, create_listener())
        logger.debug("Event leak: added listener, total listeners: %d", self.count)

    def _clear(self) -> int:
        removed = self.count
        self.emitter.remove_all_listeners(EVENT_NAME)
        return removed

    def trigger(self) -> int:
        """Invoke every registered listener; return how many there were."""
        notified = self.count
        self.emitter.emit(EVENT_NAME, "test-data")
        return notified

    def status(self) -> EventLeakStats:
        active = self.count
        return EventLeakStats(
            active_listeners=active,
            total_memory_allocated=active * MB_PER_LISTENER,
            is_leaking=self.is_leaking,
        )


event_leak = EventLeak()
