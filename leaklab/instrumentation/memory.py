"""Process memory readings shared by the status endpoint and the probe."""

from __future__ import annotations

import tracemalloc

import psutil

BYTES_PER_MB = 1024 * 1024


def process_memory() -> dict[str, int]:
    """Resident/virtual size and traced allocations of this process, in bytes.

    ``tracedCurrent``/``tracedPeak`` are 0 until tracemalloc is tracing.
    """
    info = psutil.Process().memory_info()
    traced_current, traced_peak = tracemalloc.get_traced_memory()
    return {
        "rss": info.rss,
        "vms": info.vms,
        "tracedCurrent": traced_current,
        "tracedPeak": traced_peak,
    }
