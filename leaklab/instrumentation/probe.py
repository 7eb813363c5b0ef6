"""Sample process memory and leak counters over time.

A ``MemoryProbe`` records one row per interval: resident size, traced
allocations and each engine's item count. The rows come back as a pandas
DataFrame and can be plotted to show a leak growing and being released.

Example::

    async def main():
        probe = MemoryProbe(default_engines(), interval_ms=500)
        probe.start()
        cache_leak.start()
        await asyncio.sleep(10)
        cache_leak.stop()
        await asyncio.sleep(2)
        probe.stop()
        probe.plot("cache_leak.png")
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

import pandas as pd

from leaklab.core.interval import Interval
from leaklab.instrumentation.memory import BYTES_PER_MB, process_memory
from leaklab.patterns.base import LeakEngine

logger = logging.getLogger(__name__)

TIME_COLUMN = "time_s"
RSS_COLUMN = "rss_mb"
TRACED_COLUMN = "traced_mb"


def count_column(engine_name: str) -> str:
    return f"{engine_name.replace('-', '_')}_count"


class MemoryProbe:
    """Periodic memory sampler.

    Args:
        engines: Engines whose counts are recorded, keyed by name.
        interval_ms: Milliseconds between samples while started.
    """

    def __init__(self, engines: dict[str, LeakEngine], *, interval_ms: int = 1000) -> None:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be > 0, got {interval_ms}")
        self._engines = engines
        self._interval_ms = interval_ms
        self._rows: list[dict[str, Any]] = []
        self._timer: Interval | None = None
        self._t0: float | None = None

    @property
    def running(self) -> bool:
        return self._timer is not None

    def __len__(self) -> int:
        return len(self._rows)

    def sample(self) -> dict[str, Any]:
        """Record one row now and return it."""
        now = time.monotonic()
        if self._t0 is None:
            self._t0 = now
        memory = process_memory()
        row: dict[str, Any] = {
            TIME_COLUMN: now - self._t0,
            RSS_COLUMN: memory["rss"] / BYTES_PER_MB,
            TRACED_COLUMN: memory["tracedCurrent"] / BYTES_PER_MB,
        }
        for name, engine in self._engines.items():
            row[count_column(name)] = engine.count
        self._rows.append(row)
        return row

    def start(self) -> None:
        """Take a sample now and then every interval. Needs a running loop."""
        if self._timer is not None:
            return
        self.sample()
        self._timer = Interval(self.sample, self._interval_ms / 1000)

    def stop(self) -> pd.DataFrame:
        """Stop sampling, take a final sample, return all rows."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            self.sample()
        return self.to_dataframe()

    def to_dataframe(self) -> pd.DataFrame:
        columns = [TIME_COLUMN, RSS_COLUMN, TRACED_COLUMN] + [count_column(name) for name in self._engines]
        return pd.DataFrame(self._rows, columns=columns)

    def plot(self, path: str | Path, title: str = "Memory growth") -> Path:
        """Save a two-panel PNG: memory on top, leak counts below."""
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        df = self.to_dataframe()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        fig, (ax_mem, ax_count) = plt.subplots(2, 1, figsize=(10, 7), sharex=True)

        ax_mem.plot(df[TIME_COLUMN], df[RSS_COLUMN], label="RSS")
        ax_mem.plot(df[TIME_COLUMN], df[TRACED_COLUMN], label="traced")
        ax_mem.set_ylabel("MB")
        ax_mem.set_title(title)
        ax_mem.legend()
        ax_mem.grid(True, alpha=0.3)

        for name in self._engines:
            column = count_column(name)
            ax_count.step(df[TIME_COLUMN], df[column], where="post", label=name)
        ax_count.set_xlabel("Time (s)")
        ax_count.set_ylabel("Leaked items")
        ax_count.legend()
        ax_count.grid(True, alpha=0.3)

        fig.tight_layout()
        fig.savefig(path, dpi=100)
        plt.close(fig)

        logger.info("Memory plot saved to: %s", path)
        return path
