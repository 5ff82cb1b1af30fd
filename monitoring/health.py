"""
============================================================================
GUILD STATUS BOT - HEALTH SERVER
============================================================================
Optional aiohttp HTTP server for hosting platforms and operators:

    GET /          → 200 "OK"  (basic liveness)
    GET /health    → 200 JSON  { status, uptime, armed guilds, errors, ... }
    GET /status    → alias of /health

Enabled with HEALTH_ENABLED=true; binds WEB_HOST:WEB_PORT.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import time
from typing import Any, Callable, Dict, Optional

from aiohttp import web

from config.settings import Settings, get_settings
from monitoring.scheduler import GuildMonitorScheduler
from storage.snapshot import ConfigSnapshot
from utils.helpers import TimeHelper
from utils.logger import get_logger
from utils.reporting import ErrorReporter


logger = get_logger("HealthServer")


class HealthServer:
    """
    Lightweight aiohttp server exposing scheduler diagnostics.

    Attributes
    ----------
    _app : aiohttp.web.Application
    _runner : aiohttp.web.AppRunner
    _site : aiohttp.web.TCPSite
    _start_time : float          - epoch seconds when the server started
    _request_count : int         - total requests served
    """

    def __init__(
        self,
        scheduler: GuildMonitorScheduler,
        snapshot: ConfigSnapshot,
        reporter: Optional[ErrorReporter] = None,
        settings: Optional[Settings] = None,
        is_connected: Optional[Callable[[], bool]] = None,
    ):
        self.settings = settings or get_settings()
        self.scheduler = scheduler
        self.snapshot = snapshot
        self.reporter = reporter
        self.is_connected = is_connected

        self._host = self.settings.web_host
        self._port = self.settings.web_port
        self._app = web.Application()
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._start_time: float = 0.0
        self._request_count: int = 0

        self._app.router.add_get("/", self._handle_root)
        self._app.router.add_get("/health", self._handle_health)
        self._app.router.add_get("/status", self._handle_status)

    @property
    def app(self) -> web.Application:
        return self._app

    async def start(self) -> None:
        """Bind and start serving."""
        self._start_time = time.time()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()
        logger.info(f"✓ HealthServer listening on {self._host}:{self._port}")

    async def stop(self) -> None:
        """Gracefully shut down the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
        logger.info("✓ HealthServer stopped")

    # ------------------------------------------------------------------
    # ROUTE HANDLERS
    # ------------------------------------------------------------------

    async def _handle_root(self, request: web.Request) -> web.Response:
        """GET / - simple liveness probe."""
        self._request_count += 1
        return web.Response(text="OK", status=200)

    async def _handle_health(self, request: web.Request) -> web.Response:
        """GET /health - detailed health JSON."""
        self._request_count += 1
        return web.json_response(self.build_health(), status=200)

    async def _handle_status(self, request: web.Request) -> web.Response:
        """GET /status - alias for /health."""
        return await self._handle_health(request)

    def build_health(self) -> Dict[str, Any]:
        uptime_seconds = time.time() - self._start_time if self._start_time else 0
        connected = self.is_connected() if self.is_connected else None

        return {
            "status": "healthy" if connected is not False else "degraded",
            "discord_connected": connected,
            "uptime_seconds": round(uptime_seconds, 1),
            "uptime_human": TimeHelper.seconds_to_human_readable(uptime_seconds),
            "requests_served": self._request_count,
            "timestamp": TimeHelper.get_utc_now().isoformat(),
            "app_name": self.settings.app_name,
            "app_version": self.settings.app_version,
            "configured_guilds": len(self.snapshot),
            "configured_servers": self.snapshot.total_servers,
            "scheduler": self.scheduler.get_stats(),
            "errors": self.reporter.get_stats() if self.reporter else None,
        }
