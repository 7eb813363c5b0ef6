"""Unbounded cache leak.

Every tick stores a new entry under an ever-increasing key and nothing is
ever evicted. Each entry holds a list of ``entry_size`` strings plus a
100 KiB buffer, so the cache grows by several MB per tick.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from leaklab.patterns.base import DEFAULT_TICK_MS, LeakEngine, LeakResponse, LeakStats

logger = logging.getLogger(__name__)

# Fixed per-entry estimate (list of strings plus the 100 KiB buffer).
MB_PER_ENTRY = 8.1
DEFAULT_ENTRY_SIZE = 1000
BUFFER_BYTES = 100 * 1024


@dataclass(frozen=True)
class CacheLeakStats(LeakStats):
    """Cache leak counters.

    Attributes:
        size: Number of cache entries.
        estimated_memory_mb: ``size * 8.1`` rounded to 2 decimals.
        is_leaking: Whether entries are still being added.
    """

    size: int
    estimated_memory_mb: float
    is_leaking: bool

    @property
    def count(self) -> int:
        return self.size

    @property
    def estimated_memory(self) -> float:
        return self.estimated_memory_mb

    @property
    def memory_usage(self) -> str:
        return f"~{self.estimated_memory_mb:.2f} MB"

    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "estimatedMemoryMB": self.estimated_memory_mb,
            "isLeaking": self.is_leaking,
        }


class CacheLeak(LeakEngine):
    name = "cache"
    started_message = "Cache leak started"
    already_running_message = "Cache leak already running"
    stopped_message = "Cache leak stopped and cleared"
    running_message = "Cache leak running, {count} entries"
    idle_message = "Cache leak stopped, {count} entries"

    def __init__(self, *, interval_ms: int = DEFAULT_TICK_MS, entry_size: int = DEFAULT_ENTRY_SIZE) -> None:
        super().__init__(interval_ms=interval_ms)
        self._entry_size = entry_size
        self._cache: dict[str, dict[str, Any]] = {}
        self._counter = 0

    @property
    def count(self) -> int:
        return len(self._cache)

    def start(self, *, entry_size: int | None = None, interval_ms: int | None = None) -> LeakResponse:
        """Start adding entries.

        Args:
            entry_size: Strings per entry for this run. Keeps the previous
                value when omitted.
            interval_ms: Tick interval for this run. Keeps the previous value
                when omitted.

        Options are ignored when the leak is already running.
        """
        if not self.is_leaking:
            if entry_size is not None:
                if entry_size < 1:
                    raise ValueError(f"entry_size must be >= 1, got {entry_size}")
                self._entry_size = entry_size
            if interval_ms is not None:
                if interval_ms <= 0:
                    raise ValueError(f"interval_ms must be > 0, got {interval_ms}")
                self._interval_ms = interval_ms
        return super().start()

    def _tick(self) -> None:
        key = f"leak_{self._counter}"
        self._counter += 1
        self._cache[key] = {
            "id": self._counter,
            "data": [f"Large data chunk {self._counter}"] * self._entry_size,
            "timestamp": time.time(),
            "buffer": bytearray(BUFFER_BYTES),
        }
        logger.debug("Cache leak: added entry %d, cache size: %d", self._counter, len(self._cache))

    def _clear(self) -> int:
        cleared = len(self._cache)
        self._cache.clear()
        self._counter = 0
        return cleared

    def status(self) -> CacheLeakStats:
        size = len(self._cache)
        return CacheLeakStats(
            size=size,
            estimated_memory_mb=round(size * MB_PER_ENTRY, 2),
            is_leaking=self.is_leaking,
        )


cache_leak = CacheLeak()
