"""Shared shape of the leak-pattern engines.

Every engine is a two-state machine:

| State   | Entered by | Ticker   | Accumulator           |
|---------|------------|----------|-----------------------|
| Idle    | creation, stop() | None | empty               |
| Leaking | start()    | Interval | grows by one per tick |

``start()`` while leaking reports "already running" and installs nothing.
``stop()`` while idle is a no-op reporting zero cleared items. Items added
outside a leaking run, such as direct ``global_variable.leak()`` calls, are
released by the next stop of a leaking run. ``stop()`` cancels the
ticker before clearing, so no late tick can re-add an item after cleanup.

Engines schedule their ticks on the running asyncio loop, so ``start()``
must be called from a coroutine or loop callback.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from leaklab.core.interval import Interval

logger = logging.getLogger(__name__)

DEFAULT_TICK_MS = 1000


class LeakStats(ABC):
    """Counters describing one engine's simulated leak."""

    is_leaking: bool

    @property
    @abstractmethod
    def count(self) -> int:
        """Number of leaked items currently held."""
        ...

    @property
    @abstractmethod
    def estimated_memory(self) -> float:
        """Approximate MB held by the leaked items."""
        ...

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form using the HTTP facade's field names."""
        ...


@dataclass(frozen=True)
class LeakResponse:
    """Result of an engine operation.

    Attributes:
        message: Human-readable outcome.
        stats: Engine counters taken after the operation.
        cleared_count: Items released by ``stop()``; None for other operations.
    """

    message: str
    stats: LeakStats
    cleared_count: int | None = None


class LeakEngine(ABC):
    """Base class for the five leak-pattern engines.

    Subclasses supply ``_tick`` (add one leaked item), ``_clear`` (drop all
    items, return how many), ``count``, ``status`` and the message strings.

    Args:
        interval_ms: Milliseconds between ticks while leaking.
    """

    name: str = ""
    started_message: str = ""
    already_running_message: str = ""
    stopped_message: str = ""  # formatted with {cleared}
    running_message: str = ""  # formatted with {count}
    idle_message: str = ""  # formatted with {count}

    def __init__(self, *, interval_ms: int = DEFAULT_TICK_MS) -> None:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be > 0, got {interval_ms}")
        self._interval_ms = interval_ms
        self._ticker: Interval | None = None

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def is_leaking(self) -> bool:
        return self._ticker is not None

    @property
    @abstractmethod
    def count(self) -> int:
        ...

    @abstractmethod
    def status(self) -> LeakStats:
        ...

    @abstractmethod
    def _tick(self) -> None:
        ...

    @abstractmethod
    def _clear(self) -> int:
        ...

    def start(self) -> LeakResponse:
        if self.is_leaking:
            logger.info("[%s] %s", self.name, self.already_running_message)
            return LeakResponse(self.already_running_message, self.status())

        self._ticker = Interval(self._tick, self._interval_ms / 1000)
        logger.info("[%s] %s", self.name, self.started_message)
        return LeakResponse(self.started_message, self.status())

    def stop(self) -> LeakResponse:
        if not self.is_leaking:
            message = self.stopped_message.format(cleared=0)
            logger.info("[%s] %s", self.name, message)
            return LeakResponse(message, self.status(), cleared_count=0)

        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

        cleared = self._clear()
        message = self.stopped_message.format(cleared=cleared)
        logger.info("[%s] %s", self.name, message)
        return LeakResponse(message, self.status(), cleared_count=cleared)

    def describe(self) -> LeakResponse:
        """Current status with a running/not-running message."""
        template = self.running_message if self.is_leaking else self.idle_message
        return LeakResponse(template.format(count=self.count), self.status())

    def __repr__(self) -> str:
        state = "leaking" if self.is_leaking else "idle"
        return f"{type(self).__name__}({state}, count={self.count})"
