"""The five leak-pattern engines.

Each module holds a process-wide default instance created at import time;
``default_engines()`` returns them keyed by name, in the order the demo
lists them.

Example:
    from leaklab.patterns import cache_leak

    async def main():
        cache_leak.start(interval_ms=100)
        await asyncio.sleep(1)
        print(cache_leak.status())
        cache_leak.stop()
"""

from leaklab.patterns.base import LeakEngine, LeakResponse, LeakStats
from leaklab.patterns.cache import CacheLeak, CacheLeakStats, cache_leak
from leaklab.patterns.closure import ClosureLeak, ClosureLeakStats, closure_leak
from leaklab.patterns.emitter import EventEmitter
from leaklab.patterns.event import EventLeak, EventLeakStats, event_leak
from leaklab.patterns.global_variable import (
    GlobalVariableLeak,
    GlobalVariableLeakStats,
    global_variable_leak,
)
from leaklab.patterns.timer import TimerLeak, TimerLeakStats, timer_leak


def default_engines() -> dict[str, LeakEngine]:
    return {
        engine.name: engine
        for engine in (timer_leak, global_variable_leak, cache_leak, closure_leak, event_leak)
    }


__all__ = [
    "EventEmitter",
    "LeakEngine",
    "LeakResponse",
    "LeakStats",
    "default_engines",
    # Cache
    "CacheLeak",
    "CacheLeakStats",
    "cache_leak",
    # Closure
    "ClosureLeak",
    "ClosureLeakStats",
    "closure_leak",
    # Event
    "EventLeak",
    "EventLeakStats",
    "event_leak",
    # Global variable
    "GlobalVariableLeak",
    "GlobalVariableLeakStats",
    "global_variable_leak",
    # Timer
    "TimerLeak",
    "TimerLeakStats",
    "timer_leak",
]
