"""FastAPI application exposing the leak engines over HTTP.

Routes:
    /memory-leak/<pattern>/{start,stop,status}   start/stop/inspect one leak
    /memory-leak/event/trigger                   call every leaked listener
    /memory-leak/cache/stats                     cache counters only
    /memory-leak/status                          all patterns plus process memory
    /health/ready                                readiness probe
    /internal/debug/heapdump                     token-guarded snapshot
"""

from __future__ import annotations

import hmac
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import BackgroundTasks, Depends, FastAPI, Header, HTTPException
from fastapi.responses import PlainTextResponse

from leaklab.config import Settings
from leaklab.instrumentation.memory import process_memory
from leaklab.patterns import (
    CacheLeak,
    CacheLeakStats,
    EventLeak,
    LeakEngine,
    LeakResponse,
    TimerLeak,
    default_engines,
)
from leaklab.service.capture import MANUAL_LABEL, GuardedSnapshot, install_snapshot_signal
from leaklab.service.readiness import Readiness

logger = logging.getLogger(__name__)


def _cache_stats(stats: CacheLeakStats) -> dict[str, Any]:
    # The cache has no size limit; maxSize is reported as 0.
    return {"size": stats.size, "memoryUsage": stats.memory_usage, "maxSize": 0}


def _cache_status(engine: CacheLeak) -> dict[str, Any]:
    described = engine.describe()
    return {
        "isLeaking": described.stats.is_leaking,
        "stats": _cache_stats(described.stats),
        "message": described.message,
    }


def _payload(response: LeakResponse) -> dict[str, Any]:
    body: dict[str, Any] = {"message": response.message, "stats": response.stats.to_dict()}
    if response.cleared_count is not None:
        body["clearedCount"] = response.cleared_count
    return body


def _timer_status(engine: TimerLeak) -> dict[str, Any]:
    described = engine.describe()
    return {"activeTimers": described.stats.active_timers, "message": described.message}


def token_matches(expected: str | None, supplied: str | None) -> bool:
    """Constant-time comparison of the admin token; False if either is missing."""
    if not expected or not supplied:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))


def create_app(
    settings: Settings | None = None,
    engines: dict[str, LeakEngine] | None = None,
    readiness: Readiness | None = None,
) -> FastAPI:
    """Create the demo application.

    Args:
        settings: Service settings. Defaults to ``Settings.from_env()``.
        engines: Engines keyed by name. Defaults to the process-wide
            instances from ``leaklab.patterns``.
        readiness: Readiness flag shared with snapshot captures.
    """
    settings = settings or Settings.from_env()
    engines = engines if engines is not None else default_engines()
    readiness = readiness or Readiness()
    guard = GuardedSnapshot(readiness, output_dir=settings.heapdump_dir)

    timer: TimerLeak = engines["timer"]
    cache: CacheLeak = engines["cache"]
    event: EventLeak = engines["event"]
    closure = engines["closure"]
    global_variable = engines["global-variable"]

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        handler = None
        if settings.heapdump_enabled:
            try:
                handler = install_snapshot_signal(guard)
                logger.info("[heapdump] SIGUSR2 snapshot hook installed")
            except NotImplementedError:
                logger.warning("[heapdump] signal handlers are not supported on this platform")
            except RuntimeError as exc:
                # add_signal_handler only works on the main thread's loop.
                logger.warning("[heapdump] SIGUSR2 hook not installed: %s", exc)
        try:
            yield
        finally:
            if handler is not None:
                handler.uninstall()
            for engine in engines.values():
                engine.stop()

    app = FastAPI(title="leaklab", lifespan=lifespan)
    app.state.settings = settings
    app.state.engines = engines
    app.state.readiness = readiness
    app.state.snapshot_guard = guard

    def require_admin_token(x_admin_token: str | None = Header(default=None)) -> None:
        if not token_matches(settings.heapdump_token, x_admin_token):
            raise HTTPException(status_code=403, detail="Forbidden resource")

    # --- Timer ---

    @app.post("/memory-leak/timer/start")
    async def start_timer_leak() -> dict[str, Any]:
        response = timer.start()
        return {"message": response.message, "activeTimers": response.stats.active_timers}

    @app.post("/memory-leak/timer/stop")
    async def stop_timer_leak() -> dict[str, Any]:
        response = timer.stop()
        return {
            "message": response.message,
            "stoppedTimers": response.cleared_count,
            "activeTimers": response.stats.active_timers,
        }

    @app.get("/memory-leak/timer/status")
    async def timer_status() -> dict[str, Any]:
        return _timer_status(timer)

    # --- Global variable ---

    @app.post("/memory-leak/global-variable/start")
    async def start_global_variable_leak() -> dict[str, Any]:
        return _payload(global_variable.start())

    @app.post("/memory-leak/global-variable/stop")
    async def stop_global_variable_leak() -> dict[str, Any]:
        return _payload(global_variable.stop())

    @app.get("/memory-leak/global-variable/status")
    async def global_variable_status() -> dict[str, Any]:
        return _payload(global_variable.describe())

    # --- Cache ---

    @app.post("/memory-leak/cache/start")
    async def start_cache_leak() -> dict[str, Any]:
        response = cache.start()
        return {"message": response.message, "stats": _cache_stats(response.stats)}

    @app.post("/memory-leak/cache/stop")
    async def stop_cache_leak() -> dict[str, Any]:
        response = cache.stop()
        return {
            "message": response.message,
            "clearedEntries": response.cleared_count,
            "stats": _cache_stats(response.stats),
        }

    @app.get("/memory-leak/cache/status")
    async def cache_status() -> dict[str, Any]:
        return _cache_status(cache)

    @app.get("/memory-leak/cache/stats")
    async def cache_stats() -> dict[str, Any]:
        return _cache_stats(cache.status())

    # --- Closure ---

    @app.post("/memory-leak/closure/start")
    async def start_closure_leak() -> dict[str, Any]:
        return _payload(closure.start())

    @app.post("/memory-leak/closure/stop")
    async def stop_closure_leak() -> dict[str, Any]:
        return _payload(closure.stop())

    @app.get("/memory-leak/closure/status")
    async def closure_status() -> dict[str, Any]:
        return _payload(closure.describe())

    # --- Event ---

    @app.post("/memory-leak/event/start")
    async def start_event_leak() -> dict[str, Any]:
        return _payload(event.start())

    @app.post("/memory-leak/event/stop")
    async def stop_event_leak() -> dict[str, Any]:
        return _payload(event.stop())

    @app.get("/memory-leak/event/status")
    async def event_status() -> dict[str, Any]:
        return _payload(event.describe())

    @app.post("/memory-leak/event/trigger")
    async def trigger_event() -> dict[str, Any]:
        return {"message": "Event triggered", "listenersNotified": event.trigger()}

    # --- Overview ---

    @app.get("/memory-leak/status")
    async def overall_status() -> dict[str, Any]:
        return {
            "timestamp": datetime.now(UTC).isoformat(),
            "patterns": {
                "timer": _timer_status(timer),
                "cache": _cache_status(cache),
                "closure": closure.status().to_dict(),
                "event": event.status().to_dict(),
                "globalVariable": global_variable.status().to_dict(),
            },
            "memory": process_memory(),
        }

    # --- Health & debug ---

    @app.get("/health/ready")
    async def ready() -> PlainTextResponse:
        if readiness.is_ready():
            return PlainTextResponse("ok")
        return PlainTextResponse("draining", status_code=503)

    @app.post("/internal/debug/heapdump", dependencies=[Depends(require_admin_token)])
    async def take_heapdump(background_tasks: BackgroundTasks) -> PlainTextResponse:
        if not guard.begin():
            return PlainTextResponse("already in progress", status_code=429)
        # Runs after the 202 is sent.
        background_tasks.add_task(guard.capture, MANUAL_LABEL)
        return PlainTextResponse("dump started", status_code=202)

    return app
