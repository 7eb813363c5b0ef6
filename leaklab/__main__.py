"""Run the demo service.

Usage:
    python -m leaklab

Reads PORT, HOST, HEAPDUMP_ENABLED, HEAPDUMP_TOKEN, HEAPDUMP_DIR,
TRACEMALLOC_FRAMES and the LEAKLAB_LOG* variables.
"""

import os

import uvicorn

from leaklab.config import Settings
from leaklab.heapdump.writer import ensure_tracing
from leaklab.logging_config import configure_from_env
from leaklab.service import create_app


def main() -> None:
    configure_from_env()
    settings = Settings.from_env()
    ensure_tracing(settings.tracemalloc_frames)

    app = create_app(settings)
    print(f"[PID] {os.getpid()}", flush=True)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="warning")


if __name__ == "__main__":
    main()
