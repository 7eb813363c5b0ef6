"""Write and inspect heap snapshot files.

A snapshot is a ``tracemalloc`` dump of every live traced allocation,
written to ``<output_dir>/<label>-<timestamp>.heapsnapshot``. The files are
produced here and never read back; load them with
``tracemalloc.Snapshot.load()`` to compare two points in time.

Tracing is started on the first write if it is not already running, so the
first snapshot of a process only covers allocations made after that point.
Start the process with ``PYTHONTRACEMALLOC=<frames>`` (or call
``ensure_tracing()`` early) to capture everything.
"""

from __future__ import annotations

import logging
import tracemalloc
from datetime import UTC, datetime
from pathlib import Path

from leaklab.heapdump.errors import (
    DirectoryCreationError,
    SnapshotListError,
    SnapshotStatError,
    SnapshotWriteError,
    describe,
)

logger = logging.getLogger(__name__)

HEAPDUMPS_DIR = "heapdumps"
SNAPSHOT_SUFFIX = ".heapsnapshot"


def default_output_dir() -> Path:
    """``<cwd>/heapdumps``, resolved at call time."""
    return Path.cwd() / HEAPDUMPS_DIR


def resolve_output_dir(output_dir: str | Path | None = None) -> Path:
    if output_dir is None:
        return default_output_dir().resolve()
    return Path(output_dir).resolve()


def filesystem_timestamp(now: datetime | None = None) -> str:
    """UTC ISO-8601 timestamp with ':' and '.' replaced by '-'.

    ``2024-01-15T10:30:00.123Z`` becomes ``2024-01-15T10-30-00-123Z``, which
    sorts chronologically as a plain string.
    """
    now = now or datetime.now(UTC)
    iso = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def ensure_tracing(frames: int = 1) -> None:
    """Start tracemalloc if it is not already tracing."""
    if not tracemalloc.is_tracing():
        tracemalloc.start(frames)


def _dump(path: Path) -> None:
    ensure_tracing()
    tracemalloc.take_snapshot().dump(str(path))


def write_snapshot(label: str = "snapshot", output_dir: str | Path | None = None) -> Path:
    """Write one heap snapshot and return its path.

    Args:
        label: Filename prefix distinguishing this snapshot.
        output_dir: Target directory, created if missing. Defaults to
            ``<cwd>/heapdumps``.

    Raises:
        DirectoryCreationError: The output directory could not be created.
            Nothing is written.
        SnapshotWriteError: Taking or dumping the snapshot failed.
    """
    directory = resolve_output_dir(output_dir)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreationError(exc.errno, exc.strerror, exc.filename) from exc

    path = directory / f"{label}-{filesystem_timestamp()}{SNAPSHOT_SUFFIX}"

    try:
        _dump(path)
    except Exception as exc:
        raise SnapshotWriteError(f"Failed to write heap snapshot: {describe(exc)}") from exc

    logger.info("Heap snapshot saved to: %s", path)
    return path


def get_snapshot_size(path: str | Path) -> int:
    """Size of a snapshot file in bytes.

    Raises:
        SnapshotStatError: The file could not be stat'ed.
    """
    try:
        return Path(path).stat().st_size
    except OSError as exc:
        raise SnapshotStatError(f"Failed to get snapshot size: {describe(exc)}") from exc


def list_snapshots(directory: str | Path | None = None) -> list[Path]:
    """Snapshot files in ``directory``, oldest first.

    Filenames embed their timestamp, so sorting by name is chronological.
    A missing directory yields an empty list.

    Raises:
        SnapshotListError: Listing failed for any reason other than the
            directory not existing.
    """
    search_dir = resolve_output_dir(directory)
    try:
        entries = list(search_dir.iterdir())
    except FileNotFoundError:
        return []
    except OSError as exc:
        raise SnapshotListError(f"Failed to list snapshots: {describe(exc)}") from exc

    snapshots = [entry for entry in entries if entry.name.endswith(SNAPSHOT_SUFFIX)]
    return sorted(snapshots, key=lambda entry: entry.name)
