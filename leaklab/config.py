"""Runtime settings for the demo service, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Demo service settings.

    Attributes:
        host: Bind address for the HTTP server.
        port: Port for the HTTP server.
        heapdump_enabled: Install the SIGUSR2 snapshot hook at startup.
        heapdump_token: Shared secret for the on-demand heapdump endpoint.
            The endpoint refuses every request while this is unset.
        heapdump_dir: Snapshot directory. None means ``<cwd>/heapdumps``.
        tracemalloc_frames: Frames stored per traced allocation.
    """

    host: str = "0.0.0.0"
    port: int = 3000
    heapdump_enabled: bool = False
    heapdump_token: str | None = None
    heapdump_dir: Path | None = None
    tracemalloc_frames: int = 1

    @classmethod
    def from_env(cls) -> Settings:
        heapdump_dir = os.environ.get("HEAPDUMP_DIR", "")
        frames = _env_int("TRACEMALLOC_FRAMES", 1)
        if frames < 1:
            raise ValueError(f"TRACEMALLOC_FRAMES must be >= 1, got {frames}")
        return cls(
            host=os.environ.get("HOST", "0.0.0.0"),
            port=_env_int("PORT", 3000),
            heapdump_enabled=os.environ.get("HEAPDUMP_ENABLED", "") == "1",
            heapdump_token=os.environ.get("HEAPDUMP_TOKEN") or None,
            heapdump_dir=Path(heapdump_dir) if heapdump_dir else None,
            tracemalloc_frames=frames,
        )
