"""
============================================================================
GUILD STATUS BOT - GUILD MONITOR SCHEDULER
============================================================================
One recurring monitoring timer per guild, all on the same event loop.

Lifecycle per guild
-------------------
Stopped ──start()──▶ Armed ──stop()──▶ Stopped
                     │  ▲
                     └──┘ start() again: the old timer is cancelled first

Each tick spawns a cycle as its own task; a cycle fans out one unit per
configured server:

    resolve target → probe (bounded) → reconcile label

Units run concurrently with join-all semantics. A failing unit is reported
and counted; it never affects sibling units or other guilds.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from config.settings import Settings, get_settings
from exceptions import GuildStatusException
from monitoring.prober import ProbeFailure, StatusProber
from monitoring.reconciler import GuildHandle, LabelReconciler, ReconcileResult
from storage.models import ServerEntry
from storage.snapshot import ConfigSnapshot
from utils.logger import get_logger
from utils.reporting import ErrorReporter


logger = get_logger("Scheduler")


# ============================================================================
# HANDLE & SUMMARY
# ============================================================================

@dataclass
class CycleSummary:
    """Per-result counts of one monitoring cycle, for diagnostics only."""

    guild_id: str
    updated: int = 0
    skipped: int = 0
    errored: int = 0
    duration: float = 0.0

    @property
    def total(self) -> int:
        return self.updated + self.skipped + self.errored

    def record(self, result: ReconcileResult) -> None:
        if result is ReconcileResult.UPDATED:
            self.updated += 1
        elif result is ReconcileResult.SKIPPED:
            self.skipped += 1
        else:
            self.errored += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updated": self.updated,
            "skipped": self.skipped,
            "errored": self.errored,
            "duration": round(self.duration, 3),
        }


@dataclass
class MonitorHandle:
    """
    The armed timer of one guild.

    Attributes
    ----------
    guild_id : str
        Guild the timer belongs to.
    interval_seconds : int
        Time between two cycle launches.
    task : Optional[asyncio.Task]
        The timer loop; cancelling it disarms the guild.
    armed_at : float
        Epoch timestamp of ``start()``.
    cycle_count : int
        Cycles completed since the guild was armed.
    error_count : int
        Cycles that raised instead of returning a summary.
    last_run : Optional[float]
        Epoch timestamp of the last completed cycle.
    last_summary : Optional[CycleSummary]
        Outcome counts of the last completed cycle.
    """
    guild_id: str
    interval_seconds: int
    task: Optional[asyncio.Task] = None
    armed_at: float = field(default_factory=time.time)
    cycle_count: int = 0
    error_count: int = 0
    last_run: Optional[float] = None
    last_summary: Optional[CycleSummary] = None

    @property
    def active(self) -> bool:
        return self.task is not None and not self.task.done()

    def cancel(self) -> None:
        if self.task is not None and not self.task.done():
            self.task.cancel()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "guild_id": self.guild_id,
            "interval_seconds": self.interval_seconds,
            "active": self.active,
            "armed_at": datetime.fromtimestamp(self.armed_at).isoformat(),
            "cycle_count": self.cycle_count,
            "error_count": self.error_count,
            "last_run": (
                datetime.fromtimestamp(self.last_run).isoformat()
                if self.last_run else None
            ),
            "last_summary": self.last_summary.to_dict() if self.last_summary else None,
        }


# ============================================================================
# SCHEDULER
# ============================================================================

class GuildMonitorScheduler:
    """
    Per-guild monitoring timers.

    Usage
    -----
        scheduler = GuildMonitorScheduler(snapshot, prober, reconciler)
        scheduler.start(guild)          # cycle now, then every interval
        summary = await scheduler.run_cycle(guild)
        scheduler.stop(guild.id)
        await scheduler.shutdown(timeout=10)
    """

    def __init__(
        self,
        snapshot: ConfigSnapshot,
        prober: StatusProber,
        reconciler: LabelReconciler,
        reporter: Optional[ErrorReporter] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.snapshot = snapshot
        self.prober = prober
        self.reconciler = reconciler
        self.reporter = reporter or ErrorReporter("Scheduler")
        self.interval = self.settings.monitoring.check_interval

        self._handles: Dict[str, MonitorHandle] = {}
        self._in_flight: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # ARMING
    # ------------------------------------------------------------------

    def start(self, guild: GuildHandle) -> MonitorHandle:
        """
        Arm *guild*: one cycle now, then one every interval.

        Any timer already armed for the guild is cancelled first, so a
        guild never has more than one.
        """
        guild_id = str(guild.id)

        previous = self._handles.pop(guild_id, None)
        if previous is not None:
            previous.cancel()

        handle = MonitorHandle(guild_id=guild_id, interval_seconds=self.interval)
        handle.task = asyncio.create_task(
            self._timer_loop(guild, handle), name=f"monitor-{guild_id}"
        )
        self._handles[guild_id] = handle

        logger.info(
            f"[Scheduler] {'Re-armed' if previous else 'Armed'} guild {guild_id} "
            f"(every {self.interval}s)"
        )
        return handle

    def stop(self, guild_id: str) -> bool:
        """
        Disarm a guild. Cycles already running are left to finish.

        Returns:
            False when the guild was not armed
        """
        handle = self._handles.pop(str(guild_id), None)
        if handle is None:
            return False

        handle.cancel()
        logger.info(f"[Scheduler] Stopped guild {guild_id}")
        return True

    def stop_all(self) -> int:
        """Disarm every guild; returns how many timers were cancelled."""
        handles = list(self._handles.values())
        self._handles.clear()
        for handle in handles:
            handle.cancel()

        if handles:
            logger.info(f"[Scheduler] Cancelled {len(handles)} guild timer(s)")
        return len(handles)

    async def shutdown(self, timeout: Optional[float] = None) -> None:
        """Disarm everything and wait, bounded, for in-flight cycles."""
        self.stop_all()

        pending = set(self._in_flight)
        if not pending:
            return

        logger.info(f"[Scheduler] Waiting for {len(pending)} in-flight cycle(s)")
        _, still_running = await asyncio.wait(pending, timeout=timeout)

        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning(
                f"[Scheduler] Cancelled {len(still_running)} cycle(s) still running "
                f"after {timeout}s"
            )

    def is_armed(self, guild_id: str) -> bool:
        handle = self._handles.get(str(guild_id))
        return handle is not None and handle.active

    def active_guild_ids(self) -> List[str]:
        return [guild_id for guild_id, handle in self._handles.items() if handle.active]

    @property
    def in_flight_cycles(self) -> int:
        return len(self._in_flight)

    # ------------------------------------------------------------------
    # TIMER LOOP
    # ------------------------------------------------------------------

    async def _timer_loop(self, guild: GuildHandle, handle: MonitorHandle) -> None:
        try:
            while True:
                self._spawn_cycle(guild, handle)
                await asyncio.sleep(handle.interval_seconds)
        except asyncio.CancelledError:
            logger.debug(f"[Scheduler] Timer for guild {handle.guild_id} exited")
            raise

    def _spawn_cycle(self, guild: GuildHandle, handle: MonitorHandle) -> None:
        task = asyncio.create_task(
            self._guarded_cycle(guild, handle), name=f"cycle-{handle.guild_id}"
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _guarded_cycle(self, guild: GuildHandle, handle: MonitorHandle) -> None:
        try:
            summary = await self.run_cycle(guild)
        except Exception as e:
            handle.error_count += 1
            self.reporter.report_unexpected(e, guild_id=handle.guild_id, where="cycle")
            return

        handle.cycle_count += 1
        handle.last_run = time.time()
        handle.last_summary = summary

    # ------------------------------------------------------------------
    # CYCLE
    # ------------------------------------------------------------------

    async def run_cycle(self, guild: GuildHandle) -> CycleSummary:
        """
        Probe every server of *guild* once and reconcile their labels.

        Unit failures are reported, not raised. A guild without servers
        costs nothing: no probe, no write.
        """
        guild_id = str(guild.id)
        summary = CycleSummary(guild_id=guild_id)

        entries = self.snapshot.servers(guild_id)
        if not entries:
            return summary

        started = time.perf_counter()
        hosts = list(entries)
        results = await asyncio.gather(
            *(self._run_unit(guild, host, entries[host]) for host in hosts),
            return_exceptions=True,
        )

        for host, result in zip(hosts, results):
            if isinstance(result, BaseException):
                self.reporter.report_unexpected(result, guild_id=guild_id, host=host)
                summary.record(ReconcileResult.ERRORED)
            else:
                summary.record(result)

        summary.duration = time.perf_counter() - started
        logger.debug(
            f"[Scheduler] Guild {guild_id} cycle: {summary.updated} updated, "
            f"{summary.skipped} skipped, {summary.errored} errored "
            f"in {summary.duration:.2f}s"
        )
        return summary

    async def _run_unit(self, guild: GuildHandle, host: str, entry: ServerEntry) -> ReconcileResult:
        guild_id = str(guild.id)
        try:
            target = await guild.resolve_target(entry.channel_id)

            outcome = await self.prober.probe(host, entry)
            if isinstance(outcome, ProbeFailure):
                self.reporter.report(
                    outcome.to_exception(host=host, port=entry.port, guild_id=guild_id),
                    guild_id=guild_id,
                    host=host,
                )

            return await self.reconciler.reconcile(
                target,
                outcome,
                entry.online_name,
                entry.offline_name,
                guild_id=guild_id,
                host=host,
            )
        except GuildStatusException as e:
            self.reporter.report(e, guild_id=guild_id, host=host)
            return ReconcileResult.ERRORED
        except Exception as e:
            self.reporter.report_unexpected(e, guild_id=guild_id, host=host)
            return ReconcileResult.ERRORED

    # ------------------------------------------------------------------
    # DIAGNOSTICS
    # ------------------------------------------------------------------

    def get_stats(self) -> Dict[str, Any]:
        return {
            "interval_seconds": self.interval,
            "armed_guilds": len(self.active_guild_ids()),
            "in_flight_cycles": self.in_flight_cycles,
            "guilds": [handle.to_dict() for handle in self._handles.values()],
        }
