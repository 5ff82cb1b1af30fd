"""
============================================================================
GUILD STATUS BOT - MONITORING PACKAGE
============================================================================
Runtime monitoring infrastructure:
    • StatusProber          - bounded-time Java / Bedrock status queries
    • LabelReconciler       - write-if-different channel label updates
    • GuildMonitorScheduler - one recurring timer per guild
    • HealthServer          - optional aiohttp diagnostics endpoint

File layout
-----------
monitoring/
├── __init__.py          ← this file
├── prober.py            ← StatusProber + Java/Bedrock checkers
├── reconciler.py        ← LabelReconciler + rendering surface protocols
├── scheduler.py         ← GuildMonitorScheduler + MonitorHandle
└── health.py            ← HealthServer

============================================================================
"""

from monitoring.prober import (
    StatusProber,
    JavaStatusChecker,
    BedrockStatusChecker,
    ProbeOnline,
    ProbeFailure,
    ProbeOutcome,
)
from monitoring.reconciler import (
    LabelReconciler,
    LabelTarget,
    GuildHandle,
    ReconcileResult,
    render_label,
)
from monitoring.scheduler import GuildMonitorScheduler, MonitorHandle, CycleSummary
from monitoring.health import HealthServer

__all__ = [
    # Prober
    "StatusProber",
    "JavaStatusChecker",
    "BedrockStatusChecker",
    "ProbeOnline",
    "ProbeFailure",
    "ProbeOutcome",

    # Reconciler
    "LabelReconciler",
    "LabelTarget",
    "GuildHandle",
    "ReconcileResult",
    "render_label",

    # Scheduler
    "GuildMonitorScheduler",
    "MonitorHandle",
    "CycleSummary",

    # Diagnostics
    "HealthServer",
]
