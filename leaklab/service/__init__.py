"""HTTP facade over the leak engines and snapshot tooling."""

from leaklab.service.app import create_app, token_matches
from leaklab.service.capture import (
    GuardedSnapshot,
    SignalSnapshotHandler,
    install_snapshot_signal,
)
from leaklab.service.readiness import Readiness

__all__ = [
    "GuardedSnapshot",
    "Readiness",
    "SignalSnapshotHandler",
    "create_app",
    "install_snapshot_signal",
    "token_matches",
]
