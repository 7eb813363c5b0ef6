"""Minimal synchronous event emitter.

Listeners are held by strong reference in registration order until removed,
which is exactly what makes forgotten listeners a leak.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import Any

Listener = Callable[..., Any]


class EventEmitter:
    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener for ``event`` in order.

        Returns True if the event had listeners. Listeners added or removed
        during emission take effect on the next emit.
        """
        listeners = list(self._listeners.get(event, ()))
        for listener in listeners:
            listener(*args)
        return bool(listeners)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def remove_all_listeners(self, event: str | None = None) -> None:
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)

    def __repr__(self) -> str:
        counts = {name: len(fns) for name, fns in self._listeners.items() if fns}
        return f"EventEmitter({counts})"
