"""Readiness flag consulted by the ``/health/ready`` probe."""

from __future__ import annotations


class Readiness:
    """Whether the process should receive traffic.

    Snapshot captures flip this off for their duration so a load balancer
    can drain the instance while the event loop is blocked.
    """

    def __init__(self, ready: bool = True) -> None:
        self._ready = ready

    def is_ready(self) -> bool:
        return self._ready

    def set_ready(self, ready: bool) -> None:
        self._ready = ready

    def __repr__(self) -> str:
        return f"Readiness(ready={self._ready})"
