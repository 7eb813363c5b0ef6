"""Watch a leak grow and find it in heap snapshots.

This example shows:
1. Running one leak pattern for a few seconds
2. Periodic heap snapshots with a garbage collection before each one
3. A memory chart (RSS, traced memory, leaked item counts)
4. Diffing the first and last snapshot to find the allocation site that grew

## Timeline

```
t=0          t=leak_s        t=leak_s+settle_s
|---------------|-----------------|
  leak grows      leak stopped,
  snapshots       memory released
```

The snapshot diff points at the pattern module: the lines that grew are the
ones allocating the leaked lists, buffers or closures.

Usage:
    python examples/leak_snapshots.py --pattern cache --seconds 5
"""

from __future__ import annotations

import asyncio
import tracemalloc
from pathlib import Path

from leaklab import default_engines, enable_console_logging, start_auto_snapshot
from leaklab.heapdump.writer import ensure_tracing
from leaklab.instrumentation import MemoryProbe

OUTPUT_DIR = Path("output") / "leak_snapshots"


async def run(pattern: str, leak_s: float, settle_s: float, snapshot_ms: int) -> list[Path]:
    engines = default_engines()
    engine = engines[pattern]

    probe = MemoryProbe({pattern: engine}, interval_ms=250)
    probe.start()

    engine.start()
    job = start_auto_snapshot(
        label=pattern,
        output_dir=OUTPUT_DIR,
        interval_ms=snapshot_ms,
        before_gc=True,
    )
    await asyncio.sleep(leak_s)
    files = await job.stop()

    response = engine.stop()
    print(f"{response.message} (cleared {response.cleared_count})")
    await asyncio.sleep(settle_s)

    df = probe.stop()
    print(df.tail().to_string(index=False))
    probe.plot(OUTPUT_DIR / f"{pattern}_memory.png", title=f"{pattern} leak")
    return files


def print_top_growth(first: Path, last: Path, limit: int = 5) -> None:
    before = tracemalloc.Snapshot.load(str(first))
    after = tracemalloc.Snapshot.load(str(last))

    print("\n" + "=" * 70)
    print(f"TOP GROWTH: {first.name} -> {last.name}")
    print("=" * 70)
    for stat in after.compare_to(before, "lineno")[:limit]:
        print(f"  {stat}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Run one leak pattern and diff its heap snapshots")
    parser.add_argument(
        "--pattern",
        choices=["timer", "global-variable", "cache", "closure", "event"],
        default="cache",
        help="Leak pattern to run",
    )
    parser.add_argument("--seconds", type=float, default=5.0, help="How long the leak runs")
    parser.add_argument("--settle", type=float, default=1.0, help="Seconds to sample after stopping")
    parser.add_argument("--snapshot-ms", type=int, default=2000, help="Snapshot interval in ms")
    parser.add_argument("--verbose", action="store_true", help="Log each tick")
    args = parser.parse_args()

    enable_console_logging(level="DEBUG" if args.verbose else "INFO")
    ensure_tracing(frames=5)

    snapshots = asyncio.run(run(args.pattern, args.seconds, args.settle, args.snapshot_ms))
    print(f"\n{len(snapshots)} snapshot(s) in {OUTPUT_DIR}")
    if len(snapshots) >= 2:
        print_top_growth(snapshots[0], snapshots[-1])
