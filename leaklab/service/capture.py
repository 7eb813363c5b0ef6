"""Ad-hoc snapshot capture for the debug endpoint and the operator signal.

Both entry points share one ``GuardedSnapshot``: a capture requested while
another is running is refused, and the process reports "not ready" for the
duration of each capture.

Operator usage::

    kill -USR2 <pid>    # with HEAPDUMP_ENABLED=1
"""

from __future__ import annotations

import asyncio
import gc
import logging
import os
import signal
from pathlib import Path

from leaklab.heapdump.writer import write_snapshot
from leaklab.service.readiness import Readiness

logger = logging.getLogger(__name__)

SIGNAL_LABEL = "on-sigusr2"
MANUAL_LABEL = "manual"


class GuardedSnapshot:
    """One-at-a-time snapshot capture with readiness draining.

    Call ``begin()`` first; if it returns True, run ``capture()``, which
    always releases the guard when it finishes.

    Args:
        readiness: Flag switched off while a capture runs.
        output_dir: Snapshot directory. Defaults to ``<cwd>/heapdumps``.
    """

    def __init__(self, readiness: Readiness, *, output_dir: str | Path | None = None) -> None:
        self._readiness = readiness
        self._output_dir = output_dir
        self._taking = False
        self.last_path: Path | None = None

    @property
    def in_progress(self) -> bool:
        return self._taking

    def begin(self) -> bool:
        """Claim the guard. False if a capture is already running."""
        if self._taking:
            return False
        self._taking = True
        return True

    async def capture(self, label: str = MANUAL_LABEL) -> Path | None:
        """Drain, collect garbage, write one snapshot, restore readiness.

        Failures are logged and reported as None; the guard and readiness
        are restored either way.
        """
        try:
            self._readiness.set_ready(False)
            gc.collect()
            self.last_path = write_snapshot(label, self._output_dir)
            return self.last_path
        except Exception:
            logger.exception("[heapdump] failed")
            return None
        finally:
            self._readiness.set_ready(True)
            self._taking = False


class SignalSnapshotHandler:
    """Takes a snapshot whenever the process receives ``signum``.

    Args:
        guard: Shared capture guard.
        loop: Loop the handler is registered on. Defaults to the running loop.
        label: Snapshot label.
        signum: Signal to listen for.
    """

    def __init__(
        self,
        guard: GuardedSnapshot,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        label: str = SIGNAL_LABEL,
        signum: int = signal.SIGUSR2,
    ) -> None:
        self._guard = guard
        self._loop = loop or asyncio.get_running_loop()
        self._label = label
        self._signum = signum
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def trigger(self) -> asyncio.Task | None:
        """Handle one signal delivery. Returns the capture task, if started."""
        logger.info("[heapdump] %s received, pid %d", signal.Signals(self._signum).name, os.getpid())
        if not self._guard.begin():
            logger.info("[heapdump] capture already running, signal ignored")
            return None
        return self._loop.create_task(self._guard.capture(self._label))

    def install(self) -> None:
        self._loop.add_signal_handler(self._signum, self.trigger)
        self._installed = True

    def uninstall(self) -> None:
        if self._installed:
            self._loop.remove_signal_handler(self._signum)
            self._installed = False


def install_snapshot_signal(
    guard: GuardedSnapshot,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
    label: str = SIGNAL_LABEL,
    signum: int = signal.SIGUSR2,
) -> SignalSnapshotHandler:
    handler = SignalSnapshotHandler(guard, loop=loop, label=label, signum=signum)
    handler.install()
    return handler
