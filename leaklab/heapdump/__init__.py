"""Heap snapshot capture: one-shot writes and periodic, non-overlapping jobs.

Example:
    from leaklab.heapdump import start_auto_snapshot, write_snapshot

    path = write_snapshot("before")

    job = start_auto_snapshot(label="leak", interval_ms=3000, before_gc=True)
    ...
    files = await job.stop()
"""

from leaklab.heapdump.errors import (
    DirectoryCreationError,
    HeapdumpError,
    SnapshotListError,
    SnapshotStatError,
    SnapshotWriteError,
)
from leaklab.heapdump.scheduler import AutoSnapshot, snap_every, start_auto_snapshot
from leaklab.heapdump.writer import (
    HEAPDUMPS_DIR,
    SNAPSHOT_SUFFIX,
    ensure_tracing,
    get_snapshot_size,
    list_snapshots,
    write_snapshot,
)

__all__ = [
    "HEAPDUMPS_DIR",
    "SNAPSHOT_SUFFIX",
    # Scheduler
    "AutoSnapshot",
    "snap_every",
    "start_auto_snapshot",
    # Writer
    "ensure_tracing",
    "get_snapshot_size",
    "list_snapshots",
    "write_snapshot",
    # Errors
    "DirectoryCreationError",
    "HeapdumpError",
    "SnapshotListError",
    "SnapshotStatError",
    "SnapshotWriteError",
]
