"""Periodic heap snapshots that never overlap.

``start_auto_snapshot`` captures a snapshot every ``interval_ms`` until the
returned ``AutoSnapshot`` is stopped. Captures are serialized: each tick's
work is a task that first waits for the previous tick's task, so a slow
capture delays the next one instead of running alongside it. A tick that
fires while a capture is in flight is queued behind it, never dropped.

Example::

    async def main():
        job = start_auto_snapshot(label="leak", interval_ms=3000, before_gc=True)
        await asyncio.sleep(15)
        files = await job.stop()

``snap_every`` takes a fixed number of snapshots in sequence, which is handy
for a quick before/after comparison::

    files = await snap_every(2, label="leak", interval_ms=5000, before_gc=True)
"""

from __future__ import annotations

import asyncio
import gc
import inspect
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from leaklab.core.interval import Interval
from leaklab.heapdump.writer import write_snapshot

logger = logging.getLogger(__name__)

AfterSnapshot = Callable[[Path, int], Awaitable[None] | None]

DEFAULT_LABEL = "snapshot"
DEFAULT_INTERVAL_MS = 5000


def _sequenced(label: str, index: int) -> str:
    return f"{label}-{index:04d}"


def _collect_garbage() -> None:
    # Best effort: skipped silently where the runtime offers no collector.
    collect = getattr(gc, "collect", None)
    if callable(collect):
        collect()


class AutoSnapshot:
    """Handle for a running periodic snapshot job.

    Created by ``start_auto_snapshot``; see that function for the options.

    Attributes:
        files: Copy of the snapshot paths produced so far, in capture order.
    """

    def __init__(
        self,
        *,
        label: str,
        output_dir: str | Path | None,
        interval_ms: int,
        immediate: bool,
        before_gc: bool,
        signal: asyncio.Event | None,
        on_after_snapshot: AfterSnapshot | None,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be > 0, got {interval_ms}")

        self._loop = asyncio.get_running_loop()
        self._label = label
        self._output_dir = output_dir
        self._interval_ms = interval_ms
        self._before_gc = before_gc
        self._on_after_snapshot = on_after_snapshot

        self._stopped = False
        self._seq = 0
        self._files: list[Path] = []
        self._timer: Interval | None = None
        self._signal_waiter: asyncio.Task | None = None

        # Tail of the capture chain; every new capture awaits it first.
        settled = self._loop.create_future()
        settled.set_result(None)
        self._in_flight: asyncio.Future = settled

        if signal is not None and signal.is_set():
            self._stopped = True
            logger.debug("[%s] cancelled before start, no snapshots taken", label)
            return

        if immediate:
            self._snap_once()
        self._timer = Interval(self._snap_once, interval_ms / 1000, loop=self._loop)

        if signal is not None:
            self._signal_waiter = self._loop.create_task(self._stop_on(signal))

    @property
    def files(self) -> list[Path]:
        return list(self._files)

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def sequence(self) -> int:
        """Number of successful captures so far (the next sequence index)."""
        return self._seq

    def _snap_once(self) -> None:
        if self._stopped:
            return
        previous = self._in_flight
        self._in_flight = self._loop.create_task(self._capture_after(previous))

    async def _capture_after(self, previous: asyncio.Future) -> None:
        await previous
        try:
            if self._before_gc:
                _collect_garbage()
            index = self._seq
            path = write_snapshot(_sequenced(self._label, index), self._output_dir)
        except Exception:
            logger.exception("[%s] snapshot failed", self._label)
            return

        # A written file consumes its index even if the callback fails.
        self._seq += 1
        self._files.append(path)
        if self._on_after_snapshot is None:
            return
        try:
            result = self._on_after_snapshot(path, index)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("[%s] on_after_snapshot failed for %s", self._label, path.name)

    async def _stop_on(self, signal: asyncio.Event) -> None:
        await signal.wait()
        await self.stop()

    async def stop(self) -> list[Path]:
        """Stop scheduling and wait for queued captures to finish.

        Idempotent. Every call returns the full list of produced files.
        """
        if not self._stopped:
            self._stopped = True
            if self._timer is not None:
                self._timer.cancel()
            waiter = self._signal_waiter
            if waiter is not None and waiter is not asyncio.current_task():
                waiter.cancel()
            logger.debug("[%s] auto snapshot stopping after %d captures", self._label, self._seq)
        # Shielded so a caller giving up on stop() cannot cancel a capture.
        await asyncio.shield(self._in_flight)
        return list(self._files)

    def __repr__(self) -> str:
        state = "stopped" if self._stopped else "running"
        return (
            f"AutoSnapshot('{self._label}', every {self._interval_ms}ms, {state}, "
            f"files={len(self._files)})"
        )


def start_auto_snapshot(
    *,
    label: str = DEFAULT_LABEL,
    output_dir: str | Path | None = None,
    interval_ms: int = DEFAULT_INTERVAL_MS,
    immediate: bool = True,
    before_gc: bool = False,
    signal: asyncio.Event | None = None,
    on_after_snapshot: AfterSnapshot | None = None,
) -> AutoSnapshot:
    """Take heap snapshots continuously until stopped.

    Must be called from a coroutine or callback on a running event loop.

    Args:
        label: Filename prefix; a four-digit sequence number is appended.
        output_dir: Snapshot directory. Defaults to ``<cwd>/heapdumps``.
        interval_ms: Milliseconds between ticks.
        immediate: Queue one capture right away instead of waiting for the
            first tick.
        before_gc: Run a full garbage collection before each capture.
        signal: Event that stops the job when set. Already set means the job
            never captures anything.
        on_after_snapshot: Called with ``(path, index)`` after each
            successful capture. May be a coroutine function; the next
            capture waits for it.

    Returns:
        The running job. ``await job.stop()`` to end it.
    """
    return AutoSnapshot(
        label=label,
        output_dir=output_dir,
        interval_ms=interval_ms,
        immediate=immediate,
        before_gc=before_gc,
        signal=signal,
        on_after_snapshot=on_after_snapshot,
    )


async def snap_every(
    times: int = 2,
    *,
    label: str = DEFAULT_LABEL,
    output_dir: str | Path | None = None,
    interval_ms: int = DEFAULT_INTERVAL_MS,
    before_gc: bool = False,
) -> list[Path]:
    """Take ``times`` snapshots ``interval_ms`` apart and return their paths.

    Errors from the writer propagate; snapshots already written stay on disk.
    """
    files: list[Path] = []
    for index in range(times):
        if before_gc:
            _collect_garbage()
        files.append(write_snapshot(_sequenced(label, index), output_dir))
        if index < times - 1:
            await asyncio.sleep(interval_ms / 1000)
    return files
