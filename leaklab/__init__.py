"""leaklab: memory leak pattern demos and heap snapshot tooling.

The library is silent by default. Turn logging on with
``leaklab.enable_console_logging()`` or ``leaklab.configure_from_env()``.
"""

import logging

logging.getLogger("leaklab").addHandler(logging.NullHandler())

from leaklab.config import Settings
from leaklab.core.interval import Interval
from leaklab.heapdump import (
    AutoSnapshot,
    DirectoryCreationError,
    HeapdumpError,
    SnapshotListError,
    SnapshotStatError,
    SnapshotWriteError,
    get_snapshot_size,
    list_snapshots,
    snap_every,
    start_auto_snapshot,
    write_snapshot,
)
from leaklab.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
    set_level,
)
from leaklab.patterns import (
    CacheLeak,
    ClosureLeak,
    EventLeak,
    GlobalVariableLeak,
    LeakEngine,
    LeakResponse,
    LeakStats,
    TimerLeak,
    default_engines,
)

__version__ = "0.1.0"

__all__ = [
    "Interval",
    "Settings",
    # Heap snapshots
    "AutoSnapshot",
    "get_snapshot_size",
    "list_snapshots",
    "snap_every",
    "start_auto_snapshot",
    "write_snapshot",
    "DirectoryCreationError",
    "HeapdumpError",
    "SnapshotListError",
    "SnapshotStatError",
    "SnapshotWriteError",
    # Leak engines
    "CacheLeak",
    "ClosureLeak",
    "EventLeak",
    "GlobalVariableLeak",
    "LeakEngine",
    "LeakResponse",
    "LeakStats",
    "TimerLeak",
    "default_engines",
    # Logging
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
]
