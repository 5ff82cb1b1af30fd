"""
============================================================================
GUILD STATUS BOT - LABEL RECONCILER
============================================================================
Turns a probe outcome into the name of a status channel.

The reconciler is stateless across cycles: it renders the wanted label,
reads the target's current label fresh and writes only when the two
differ. A second reconcile with the same outcome is therefore free.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from enum import Enum
from typing import Optional, Protocol

from config.constants import Limits
from config.settings import Settings, get_settings
from exceptions import GuildStatusException, TargetNotFound, TargetUnmanageable
from monitoring.prober import ProbeOnline, ProbeOutcome
from utils.helpers import StringHelper
from utils.logger import get_logger
from utils.reporting import ErrorReporter


logger = get_logger("LabelReconciler")


class ReconcileResult(str, Enum):
    UPDATED = "updated"
    SKIPPED = "skipped"
    ERRORED = "errored"


# ============================================================================
# RENDERING SURFACE
# ============================================================================

class LabelTarget(Protocol):
    """A renamable status channel."""

    id: str

    def is_manageable(self) -> bool:
        ...

    async def get_current_label(self) -> str:
        ...

    async def set_label(self, label: str) -> None:
        ...


class GuildHandle(Protocol):
    """A guild whose status channels can be looked up by id."""

    id: str

    async def resolve_target(self, channel_id: str) -> LabelTarget:
        ...


def render_label(
    template: str,
    online: Optional[int] = None,
    max_players: Optional[int] = None,
    max_length: int = Limits.CHANNEL_NAME_MAX,
) -> str:
    """
    Substitute ``{online}`` / ``{max}`` and cut the result to *max_length*.

    >>> render_label("Online | {online}/{max}", 5, 20)
    'Online | 5/20'
    """
    values = {}
    if online is not None:
        values["online"] = online
    if max_players is not None:
        values["max"] = max_players

    label = StringHelper.substitute(template, values).strip()
    return label[:max_length]


# ============================================================================
# RECONCILER
# ============================================================================

class LabelReconciler:
    """
    Write-if-different label updates with an offline fallback.
    """

    def __init__(
        self,
        reporter: Optional[ErrorReporter] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.max_length = self.settings.monitoring.label_max_length
        self.reporter = reporter or ErrorReporter("LabelReconciler")

    async def reconcile(
        self,
        target: LabelTarget,
        outcome: ProbeOutcome,
        online_template: str,
        offline_template: str,
        *,
        guild_id: Optional[str] = None,
        host: Optional[str] = None,
    ) -> ReconcileResult:
        """
        Bring *target*'s label in line with *outcome*.

        Returns:
            UPDATED when a write happened, SKIPPED when no write was
            needed or allowed, ERRORED when the wanted label could not
            be applied
        """
        if not target.is_manageable():
            self.reporter.report(
                TargetUnmanageable(target_id=target.id, host=host, guild_id=guild_id),
                guild_id=guild_id,
                host=host,
            )
            return ReconcileResult.SKIPPED

        if not isinstance(outcome, ProbeOnline):
            try:
                return await self._apply(target, render_label(offline_template, max_length=self.max_length))
            except Exception as e:
                self._report(e, guild_id=guild_id, host=host)
                return ReconcileResult.ERRORED

        try:
            label = render_label(
                online_template,
                online=outcome.players_online,
                max_players=outcome.players_max,
                max_length=self.max_length,
            )
            return await self._apply(target, label)
        except Exception as e:
            self._report(e, guild_id=guild_id, host=host)
            # A missing or forbidden channel would refuse the offline label too
            if not isinstance(e, (TargetUnmanageable, TargetNotFound)):
                await self._fall_back_offline(target, offline_template, guild_id=guild_id, host=host)
            return ReconcileResult.ERRORED

    async def _apply(self, target: LabelTarget, label: str) -> ReconcileResult:
        current = await target.get_current_label()
        if current == label:
            return ReconcileResult.SKIPPED

        await target.set_label(label)
        logger.debug(f"[Label] {target.id}: {current!r} → {label!r}")
        return ReconcileResult.UPDATED

    async def _fall_back_offline(
        self,
        target: LabelTarget,
        offline_template: str,
        *,
        guild_id: Optional[str],
        host: Optional[str],
    ) -> None:
        try:
            await self._apply(target, render_label(offline_template, max_length=self.max_length))
        except Exception as e:
            logger.debug(f"[Label] Offline fallback for {target.id} failed too: {e!r}")

    def _report(self, error: Exception, *, guild_id: Optional[str], host: Optional[str]) -> None:
        if isinstance(error, GuildStatusException):
            self.reporter.report(error, guild_id=guild_id, host=host)
        else:
            self.reporter.report_unexpected(error, guild_id=guild_id, host=host, where="reconcile")
