"""Global variable leak.

``leaked_arrays`` is a module-level list that lives as long as the process.
Every tick appends a list of one million strings (~8 MB of references) to
it. The container is never replaced, only truncated in place, so every
holder of a reference to it sees the same data.

Use the accessors rather than the list itself:

    leak()     # append one array
    stats()    # counters
    reset()    # truncate to zero, returns the number of arrays dropped
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from leaklab.patterns.base import LeakEngine, LeakStats

logger = logging.getLogger(__name__)

MB_PER_ARRAY = 8
ARRAY_LENGTH = 1_000_000

leaked_arrays: list[list[str]] = []


@dataclass(frozen=True)
class GlobalVariableLeakStats(LeakStats):
    leaked_arrays: int
    estimated_memory_mb: int
    is_leaking: bool

    @property
    def count(self) -> int:
        return self.leaked_arrays

    @property
    def estimated_memory(self) -> float:
        return self.estimated_memory_mb

    def to_dict(self) -> dict[str, Any]:
        return {
            "leakedArrays": self.leaked_arrays,
            "estimatedMemoryMB": self.estimated_memory_mb,
            "isLeaking": self.is_leaking,
        }


def leak() -> int:
    """Append one large array to the global container; return the new length."""
    leaked_arrays.append(["leak"] * ARRAY_LENGTH)
    logger.debug("Global variable leak: added array, total: %d", len(leaked_arrays))
    return len(leaked_arrays)


def reset() -> int:
    cleared = len(leaked_arrays)
    del leaked_arrays[:]
    return cleared


def stats(*, is_leaking: bool = False) -> GlobalVariableLeakStats:
    count = len(leaked_arrays)
    return GlobalVariableLeakStats(
        leaked_arrays=count,
        estimated_memory_mb=count * MB_PER_ARRAY,
        is_leaking=is_leaking,
    )


class GlobalVariableLeak(LeakEngine):
    """Engine driving ``leak()`` on a ticker.

    All instances share the one module-level container.
    """

    name = "global-variable"
    started_message = "Global variable leak started - arrays will accumulate in global scope"
    already_running_message = "Global variable leak was already running"
    stopped_message = "Global variable leak stopped - cleared {cleared} arrays"
    running_message = "Global variable leak is running"
    idle_message = "Global variable leak is not running"

    @property
    def count(self) -> int:
        return len(leaked_arrays)

    def _tick(self) -> None:
        leak()

    def _clear(self) -> int:
        return reset()

    def status(self) -> GlobalVariableLeakStats:
        return stats(is_leaking=self.is_leaking)


global_variable_leak = GlobalVariableLeak()
