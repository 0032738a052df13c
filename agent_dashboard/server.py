"""Agent Dashboard — HTTP server.

Exposes:
  GET  /                   — dashboard page (static/index.html)
  GET  /api/agents         — latest ScanSnapshot as JSON
  GET  /api/health         — liveness check
  GET  /api/live-reload    — Server-Sent Events, one ``reload`` per file change

Start with::

    python -m agent_dashboard serve --port=9999
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles

from agent_dashboard import __version__
from agent_dashboard.cache import SnapshotCache
from agent_dashboard.config import DashboardConfig
from agent_dashboard.live_reload import (
    STATIC_DIR,
    LiveReloadBroadcaster,
    LiveReloadWatcher,
    event_stream,
)
from agent_dashboard.probe import ShellProbe
from agent_dashboard.scanner import AgentScanner
from agent_dashboard.scanner.tailscale import resolve_tailscale_hostname

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for the dashboard server."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ──────────────────────────────────────────────────────────────────
# FastAPI app
# ──────────────────────────────────────────────────────────────────

def create_app(
    config: DashboardConfig | None = None,
    cache: SnapshotCache | None = None,
    broadcaster: LiveReloadBroadcaster | None = None,
) -> FastAPI:
    """Build the dashboard app.

    The refresh timer and the file watcher run for the lifetime of the
    app and are torn down on shutdown.
    """
    config = config or DashboardConfig.from_env()
    if cache is None:
        scanner = AgentScanner(config)
        cache = SnapshotCache(scanner.scan, interval_seconds=config.refresh_seconds)
    broadcaster = broadcaster or LiveReloadBroadcaster()
    watcher = LiveReloadWatcher(broadcaster) if config.live_reload else None

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        broadcaster.bind(asyncio.get_running_loop())
        await cache.start()
        if watcher is not None:
            watcher.start()
        try:
            yield
        finally:
            if watcher is not None:
                watcher.stop()
            await cache.stop()

    app = FastAPI(title="Agent Dashboard", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.cache = cache
    app.state.broadcaster = broadcaster

    @app.get("/api/agents")
    async def agents():
        try:
            snapshot = await cache.get()
        except Exception as exc:
            logger.error("Scan failed with no cached snapshot: %s", exc)
            return JSONResponse({"error": str(exc)}, status_code=500)
        return snapshot.to_dict()

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "timestamp": _utc_now()}

    @app.get("/api/live-reload")
    async def live_reload(request: Request):
        return StreamingResponse(
            event_stream(request, broadcaster),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )

    # Mounted last so the /api routes take precedence.
    app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")
    return app


# ──────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────

def _log_banner(config: DashboardConfig) -> None:
    logger.info("Agent Dashboard running at:")
    logger.info("  Local:     http://localhost:%d", config.port)
    ts_hostname = resolve_tailscale_hostname(ShellProbe(timeout=config.probe_timeout))
    if ts_hostname:
        logger.info("  Tailscale: http://%s:%d", ts_hostname, config.port)
    logger.info("Watching %s; API: GET /api/agents", config.gits_dir)


def serve(config: DashboardConfig | None = None) -> None:
    import uvicorn

    config = config or DashboardConfig.from_env()
    configure_logging(config.log_level)
    app = create_app(config)
    _log_banner(config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
