"""
============================================================================
GUILD STATUS BOT - MAIN APPLICATION
============================================================================
Wires every layer of the bot together and owns the process lifecycle.

    Storage      ConfigStore (servers.json) + ConfigSnapshot
    Monitoring   StatusProber → LabelReconciler → GuildMonitorScheduler
    Commands     ServerRegistry + slash command cog
    Platform     StatusBot (discord.py), optional HealthServer (aiohttp)

Startup Order
-------------
1.  Load settings & configure logging
2.  Load the stored configuration into the snapshot
3.  Create prober, reconciler and scheduler
4.  Create the registry and the Discord client
5.  Start the HealthServer (when enabled)
6.  Connect to Discord (blocks until shutdown); guilds with configured
    servers are armed once the gateway is ready

Shutdown Order
--------------
On SIGINT / SIGTERM or an unhandled loop error:
    cancel guild timers → wait for in-flight cycles → final bounded save →
    stop health server → close the Discord client

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import signal
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# ---------------------------------------------------------------------------
# Path setup - ensure the project root is importable regardless of CWD
# ---------------------------------------------------------------------------
sys.path.insert(0, str(Path(__file__).parent))

from bot.client import StatusBot
from bot.registry import ServerRegistry
from config.settings import Settings, get_settings
from exceptions import ConfigSaveFailed, ConfigurationError, InitializationError
from monitoring.health import HealthServer
from monitoring.prober import StatusProber
from monitoring.reconciler import LabelReconciler
from monitoring.scheduler import GuildMonitorScheduler
from storage.snapshot import ConfigSnapshot
from storage.store import ConfigStore
from utils.logger import get_logger, setup_logging
from utils.reporting import ErrorReporter


logger = get_logger("Main")


# ============================================================================
# APPLICATION CLASS
# ============================================================================

class StatusBotApplication:
    """
    Top-level application orchestrator.

    Owns every subsystem and is the single place that knows the startup /
    shutdown order. Subsystems receive their collaborators through their
    constructors; the snapshot is shared by reference.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.reporter = ErrorReporter("Monitor")

        # --- subsystems (populated during startup) ---
        self.store: Optional[ConfigStore] = None
        self.snapshot: Optional[ConfigSnapshot] = None
        self.prober: Optional[StatusProber] = None
        self.reconciler: Optional[LabelReconciler] = None
        self.scheduler: Optional[GuildMonitorScheduler] = None
        self.registry: Optional[ServerRegistry] = None
        self.bot: Optional[StatusBot] = None
        self.health_server: Optional[HealthServer] = None

        # --- lifecycle ---
        self._stop_event: Optional[asyncio.Event] = None
        self._shutdown_started = False

    # ------------------------------------------------------------------
    # BANNER
    # ------------------------------------------------------------------

    def _print_banner(self) -> None:
        monitoring = self.settings.monitoring
        banner = f"""
╔══════════════════════════════════════════════════════════════════════════╗
║   🎮  {self.settings.app_name} v{self.settings.app_version:<10}
║   Environment : {self.settings.environment.value:<12}
║   Interval    : {monitoring.check_interval}s   Probe deadline : {monitoring.probe_deadline}s
║   Data file   : {self.settings.storage.data_file}
╚══════════════════════════════════════════════════════════════════════════╝
"""
        logger.info(banner)
        logger.debug(f"Settings: {self.settings.to_dict()}")

    # ==================================================================
    # PHASE 1 - STORAGE
    # ==================================================================

    async def _init_storage(self) -> None:
        logger.info("── Phase 1: Storage ──────────────────────────────")
        self.store = ConfigStore(reporter=self.reporter, settings=self.settings)
        guilds = await self.store.load()
        self.snapshot = ConfigSnapshot(guilds)
        logger.info(
            f"  ✓ {self.snapshot.total_servers} server(s) in {len(self.snapshot)} guild(s)"
        )

    # ==================================================================
    # PHASE 2 - MONITORING
    # ==================================================================

    def _init_monitoring(self) -> None:
        logger.info("── Phase 2: Monitoring ───────────────────────────")
        self.prober = StatusProber(settings=self.settings)
        self.reconciler = LabelReconciler(reporter=self.reporter, settings=self.settings)
        self.scheduler = GuildMonitorScheduler(
            self.snapshot,
            self.prober,
            self.reconciler,
            reporter=self.reporter,
            settings=self.settings,
        )
        logger.info("  ✓ Prober, reconciler and scheduler created")

    # ==================================================================
    # PHASE 3 - DISCORD
    # ==================================================================

    def _init_bot(self) -> None:
        logger.info("── Phase 3: Discord ──────────────────────────────")
        if not self.settings.bot.has_token:
            raise ConfigurationError(
                "DISCORD_TOKEN is not set",
                config_key="DISCORD_TOKEN",
                expected_type=str,
            )

        self.registry = ServerRegistry(
            self.snapshot, self.store, self.scheduler, settings=self.settings
        )
        self.bot = StatusBot(self.registry, settings=self.settings)
        logger.info("  ✓ Discord client created")

    # ==================================================================
    # PHASE 4 - HEALTH ENDPOINT
    # ==================================================================

    async def _init_health(self) -> None:
        if not self.settings.health_enabled:
            return

        logger.info("── Phase 4: Health endpoint ──────────────────────")
        self.health_server = HealthServer(
            self.scheduler,
            self.snapshot,
            reporter=self.reporter,
            settings=self.settings,
            is_connected=lambda: self.bot is not None and self.bot.is_ready(),
        )
        await self.health_server.start()

    # ==================================================================
    # FULL STARTUP SEQUENCE
    # ==================================================================

    async def startup(self) -> bool:
        """
        Execute the complete startup sequence.
        Returns False (and logs errors) if any critical phase fails.
        """
        self._stop_event = asyncio.Event()
        self._print_banner()

        try:
            await self._init_storage()
            self._init_monitoring()
            self._init_bot()
        except ConfigurationError as e:
            logger.error(f"  ✗ {e.log_format()}")
            return False
        except Exception as e:
            logger.opt(exception=e).error(f"  ✗ Startup failed: {e!r}")
            return False

        try:
            await self._init_health()
        except OSError as e:
            logger.warning(f"  ⚠ Health endpoint unavailable, continuing without it: {e}")
            self.health_server = None

        logger.info("  ✓ Startup complete, connecting to Discord")
        return True

    # ==================================================================
    # RUN
    # ==================================================================

    async def run(self) -> None:
        """
        Connect to Discord and block until the client stops or a shutdown
        is requested.
        """
        if self.bot is None or self._stop_event is None:
            raise InitializationError("run() called before a successful startup()", component="discord")

        bot_task = asyncio.create_task(
            self.bot.start(self.settings.bot.token.get_secret_value()), name="discord-client"
        )
        stop_task = asyncio.create_task(self._stop_event.wait(), name="stop-event")

        done, _ = await asyncio.wait({bot_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)

        if bot_task in done:
            stop_task.cancel()
            error = bot_task.exception()
            if error is not None:
                logger.opt(exception=error).error(f"  ✗ Discord client stopped: {error!r}")
            else:
                logger.info("  Discord client closed")
        else:
            logger.info("  Shutdown requested, disconnecting from Discord")
            await self._close_bot()
            try:
                await bot_task
            except Exception as e:
                logger.debug(f"  Discord client exited with {e!r}")

    def request_shutdown(self, reason: str = "requested") -> None:
        if self._stop_event is not None and not self._stop_event.is_set():
            logger.info(f"  ⚡ Shutdown requested ({reason})")
            self._stop_event.set()

    # ==================================================================
    # SHUTDOWN SEQUENCE
    # ==================================================================

    async def shutdown(self) -> None:
        """
        Graceful shutdown in reverse order.
        Each step is guarded so a failure in one subsystem doesn't
        prevent the others from cleaning up.
        """
        if self._shutdown_started:
            return
        self._shutdown_started = True

        logger.info("=" * 74)
        logger.info("  SHUTTING DOWN …")
        logger.info("=" * 74)

        timeout = self.settings.shutdown_timeout

        # 1. Disarm every guild and let running cycles finish
        if self.scheduler:
            try:
                await self.scheduler.shutdown(timeout=timeout)
                logger.info("  ✓ Scheduler stopped")
            except Exception as e:
                logger.opt(exception=e).error(f"  ✗ Scheduler stop error: {e!r}")

        # 2. Final save of the snapshot
        if self.store is not None and self.snapshot is not None:
            try:
                await asyncio.wait_for(self.store.save(self.snapshot.guilds()), timeout=timeout)
                logger.info("  ✓ Configuration saved")
            except ConfigSaveFailed:
                logger.error("  ✗ Final configuration save failed")
            except asyncio.TimeoutError:
                logger.error(f"  ✗ Final configuration save timed out after {timeout}s")

        # 3. Stop health server
        if self.health_server:
            try:
                await self.health_server.stop()
            except Exception as e:
                logger.error(f"  ✗ HealthServer stop error: {e!r}")

        # 4. Close the Discord client
        await self._close_bot()

        logger.info("=" * 74)
        logger.info("  ✓ SHUTDOWN COMPLETE")
        logger.info("=" * 74)

    async def _close_bot(self) -> None:
        if self.bot and not self.bot.is_closed():
            try:
                await self.bot.close()
                logger.info("  ✓ Discord client closed")
            except Exception as e:
                logger.error(f"  ✗ Discord close error: {e!r}")


# ============================================================================
# SIGNAL & LOOP ERROR HANDLERS
# ============================================================================

def _install_signal_handlers(loop: asyncio.AbstractEventLoop, app: StatusBotApplication) -> None:
    """
    Install SIGTERM / SIGINT handlers so that the bot shuts down gracefully
    even when killed by the OS.
    """
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, app.request_shutdown, sig.name)
        except (NotImplementedError, OSError):
            # Not supported on Windows; KeyboardInterrupt still works there
            pass


def _install_exception_handler(loop: asyncio.AbstractEventLoop, app: StatusBotApplication) -> None:
    """Log errors nobody awaited and take the process down cleanly."""

    def handler(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        error = context.get("exception")
        message = context.get("message", "Unhandled error in event loop")
        logger.opt(exception=error).error(f"  ✗ {message}")
        app.request_shutdown("unhandled loop error")

    loop.set_exception_handler(handler)


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

async def main() -> int:
    """
    Async main - creates the app, starts it, and runs until shutdown.
    """
    settings = get_settings()
    setup_logging(settings)

    app = StatusBotApplication(settings)

    loop = asyncio.get_running_loop()
    _install_signal_handlers(loop, app)
    _install_exception_handler(loop, app)

    if not await app.startup():
        logger.error("  ✗ Startup failed - exiting")
        await app.shutdown()
        return 1

    try:
        await app.run()
    finally:
        await app.shutdown()
    return 0


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
