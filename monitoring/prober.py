"""
============================================================================
GUILD STATUS BOT - STATUS PROBER
============================================================================
Bounded-time status queries against Minecraft servers.

Architecture
------------
StatusProber              ← picks a checker, enforces the overall deadline
├── JavaStatusChecker     ← optional SRV lookup, then Server List Ping (TCP)
└── BedrockStatusChecker  ← RakNet unconnected ping (UDP)

Every probe resolves to exactly one outcome:

    ProbeOnline(players_online, players_max, latency_ms, version)
    ProbeFailure(cause, error_type, message)   cause ∈ timeout|network|protocol

The prober never raises for an unreachable or misbehaving server and has
no side effects.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import socket
import time
from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Tuple, Union

import dns.asyncresolver
import dns.exception
from mcstatus import BedrockServer, JavaServer

from config.constants import Defaults, ProbeCause, ProtocolVariant
from config.settings import Settings, get_settings
from exceptions import (
    ProbeException,
    ProbeNetworkFailure,
    ProbeProtocolError,
    ProbeTimeoutError,
)
from storage.models import ServerEntry
from utils.validators import HostValidator
from utils.logger import get_logger


logger = get_logger("StatusProber")


# ============================================================================
# PROBE OUTCOMES
# ============================================================================

@dataclass(frozen=True)
class ProbeOnline:
    """The server answered a status query."""

    players_online: int
    players_max: int
    latency_ms: Optional[float] = None
    version: Optional[str] = None


@dataclass(frozen=True)
class ProbeFailure:
    """The server could not be queried within the deadline."""

    cause: ProbeCause
    error_type: str
    message: str = ""

    def to_exception(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        guild_id: Optional[str] = None,
    ) -> ProbeException:
        """Build the reportable exception matching this failure."""
        kwargs = {"host": host, "port": port, "guild_id": guild_id}
        message = self.message or self.error_type
        if self.cause is ProbeCause.TIMEOUT:
            return ProbeTimeoutError(f"Probe timed out: {message}", **kwargs)
        if self.cause is ProbeCause.NETWORK:
            return ProbeNetworkFailure(f"Network failure: {message}", **kwargs)
        return ProbeProtocolError(f"Bad status reply: {message}", **kwargs)


ProbeOutcome = Union[ProbeOnline, ProbeFailure]


# ============================================================================
# CHECKERS
# ============================================================================

class StatusChecker(Protocol):
    async def query(self, host: str, port: int, timeout: float) -> ProbeOnline:
        ...


class JavaStatusChecker:
    """
    Server List Ping over TCP.

    Like the game client, a hostname without an explicit address is first
    looked up as a ``_minecraft._tcp`` SRV record; when there is none the
    host and port are used as given.
    """

    def __init__(self, enable_srv: bool = True):
        self.enable_srv = enable_srv

    async def resolve_srv(self, host: str, port: int, timeout: float) -> Tuple[str, int]:
        if not self.enable_srv or HostValidator.is_valid_ip(host) or host == "localhost":
            return host, port

        try:
            answers = await dns.asyncresolver.resolve(
                f"{Defaults.SRV_SERVICE}.{host}", "SRV", lifetime=timeout
            )
        except dns.exception.DNSException as e:
            logger.debug(f"[SRV] No record for {host}: {e.__class__.__name__}")
            return host, port

        record = min(answers, key=lambda r: (r.priority, -r.weight))
        target = record.target.to_text(omit_final_dot=True)
        logger.debug(f"[SRV] {host} → {target}:{record.port}")
        return target, record.port

    async def query(self, host: str, port: int, timeout: float) -> ProbeOnline:
        host, port = await self.resolve_srv(host, port, timeout)

        server = JavaServer(host, port, timeout=timeout)
        status = await server.async_status()

        return ProbeOnline(
            players_online=status.players.online,
            players_max=status.players.max,
            latency_ms=round(status.latency, 1),
            version=status.version.name,
        )


class BedrockStatusChecker:
    """
    RakNet unconnected ping over UDP.
    """

    async def query(self, host: str, port: int, timeout: float) -> ProbeOnline:
        server = BedrockServer(host, port, timeout=timeout)
        status = await server.async_status()

        return ProbeOnline(
            players_online=status.players.online,
            players_max=status.players.max,
            latency_ms=round(status.latency, 1),
            version=status.version.name,
        )


# ============================================================================
# PROBER
# ============================================================================

def classify_error(error: BaseException) -> ProbeCause:
    """
    Map an exception raised by a status query to a failure cause.

    Connection and resolution errors are network failures. A bare
    ``OSError`` without an errno is what the protocol layer raises for a
    malformed reply, so it counts as a protocol failure.
    """
    if isinstance(error, (asyncio.TimeoutError, socket.timeout, TimeoutError)):
        return ProbeCause.TIMEOUT
    if isinstance(error, (dns.exception.DNSException, socket.gaierror, ConnectionError)):
        return ProbeCause.NETWORK
    if isinstance(error, OSError) and error.errno is not None:
        return ProbeCause.NETWORK
    return ProbeCause.PROTOCOL


class StatusProber:
    """
    Bounded-time status query.

    ``probe()`` wraps the checker in ``asyncio.wait_for``: when the overall
    deadline expires the inner query is cancelled and its late result is
    dropped.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        checkers: Optional[Dict[ProtocolVariant, StatusChecker]] = None,
    ):
        self.settings = settings or get_settings()
        self.query_timeout = self.settings.monitoring.probe_timeout
        self.deadline = self.settings.monitoring.probe_deadline

        self.checkers: Dict[ProtocolVariant, StatusChecker] = {
            ProtocolVariant.JAVA: JavaStatusChecker(enable_srv=self.settings.monitoring.enable_srv),
            ProtocolVariant.BEDROCK: BedrockStatusChecker(),
        }
        if checkers:
            self.checkers.update(checkers)

    async def probe(
        self,
        host: str,
        entry: ServerEntry,
        overall_timeout: Optional[float] = None,
    ) -> ProbeOutcome:
        """
        Query *host* using the protocol and port stored in *entry*.

        Returns:
            ProbeOnline or ProbeFailure, never raises for a probe failure
        """
        deadline = overall_timeout if overall_timeout is not None else self.deadline
        checker = self.checkers[entry.protocol]
        started = time.perf_counter()

        try:
            outcome = await asyncio.wait_for(
                checker.query(host, entry.port, self.query_timeout),
                timeout=deadline,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            cause = classify_error(e)
            elapsed = time.perf_counter() - started
            logger.debug(
                f"[Probe] {host}:{entry.port} ({entry.protocol.value}) failed "
                f"after {elapsed:.2f}s: {cause.value} {e!r}"
            )
            return ProbeFailure(
                cause=cause,
                error_type=e.__class__.__name__,
                message=str(e)[:200] or f"no reply within {deadline}s",
            )

        logger.debug(
            f"[Probe] {host}:{entry.port} online "
            f"{outcome.players_online}/{outcome.players_max} in {outcome.latency_ms}ms"
        )
        return outcome
