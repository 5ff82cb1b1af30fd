from __future__ import annotations

import asyncio
import socket
import time
from types import SimpleNamespace

import dns.asyncresolver
import dns.name
import dns.resolver
import pytest

from config.constants import ProbeCause, ProtocolVariant
from config.settings import Settings
from exceptions import ProbeNetworkFailure, ProbeTimeoutError
from monitoring.prober import (
    JavaStatusChecker,
    ProbeFailure,
    ProbeOnline,
    StatusProber,
    classify_error,
)
from tests.fakes import FakeChecker, make_entry


@pytest.mark.asyncio
async def test_online_probe_uses_entry_port(prober: StatusProber, checker: FakeChecker) -> None:
    outcome = await prober.probe("mc.example.com", make_entry(port=25570))

    assert outcome == ProbeOnline(players_online=5, players_max=20)
    assert checker.calls == [("mc.example.com", 25570, 0.05)]


@pytest.mark.asyncio
async def test_probe_selects_checker_by_protocol(settings: Settings) -> None:
    java = FakeChecker(default=ProbeOnline(players_online=1, players_max=10))
    bedrock = FakeChecker(default=ProbeOnline(players_online=2, players_max=30))
    prober = StatusProber(
        settings=settings,
        checkers={ProtocolVariant.JAVA: java, ProtocolVariant.BEDROCK: bedrock},
    )

    outcome = await prober.probe("be.example.com", make_entry(protocol=ProtocolVariant.BEDROCK))

    assert outcome.players_max == 30
    assert bedrock.calls == [("be.example.com", 19132, 0.05)]
    assert java.calls == []


@pytest.mark.asyncio
async def test_probe_past_deadline_times_out_and_cancels_query(settings: Settings) -> None:
    slow = FakeChecker(delay=10)
    prober = StatusProber(settings=settings, checkers={ProtocolVariant.JAVA: slow})

    started = time.perf_counter()
    outcome = await prober.probe("slow.example.com", make_entry(), overall_timeout=0.05)
    elapsed = time.perf_counter() - started

    assert isinstance(outcome, ProbeFailure)
    assert outcome.cause is ProbeCause.TIMEOUT
    assert elapsed < 1.0
    assert slow.cancelled


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "cause"),
    [
        (ConnectionRefusedError(111, "refused"), ProbeCause.NETWORK),
        (socket.gaierror(-2, "Name or service not known"), ProbeCause.NETWORK),
        (dns.resolver.NXDOMAIN(), ProbeCause.NETWORK),
        (socket.timeout("timed out"), ProbeCause.TIMEOUT),
        (OSError("Received invalid status response packet."), ProbeCause.PROTOCOL),
        (ValueError("bad json"), ProbeCause.PROTOCOL),
    ],
)
async def test_query_errors_become_failures(settings: Settings, error: Exception, cause: ProbeCause) -> None:
    prober = StatusProber(
        settings=settings,
        checkers={ProtocolVariant.JAVA: FakeChecker(default=error)},
    )

    outcome = await prober.probe("mc.example.com", make_entry())

    assert isinstance(outcome, ProbeFailure)
    assert outcome.cause is cause
    assert outcome.error_type == error.__class__.__name__


def test_failure_maps_to_reportable_exception() -> None:
    timeout = ProbeFailure(cause=ProbeCause.TIMEOUT, error_type="TimeoutError")
    network = ProbeFailure(cause=ProbeCause.NETWORK, error_type="gaierror", message="no such host")

    assert isinstance(timeout.to_exception(host="h", port=1), ProbeTimeoutError)
    error = network.to_exception(host="h", port=1, guild_id="9")
    assert isinstance(error, ProbeNetworkFailure)
    assert error.details == {"host": "h", "guild_id": "9", "port": 1}


def test_classify_error_prefers_timeout() -> None:
    assert classify_error(asyncio.TimeoutError()) is ProbeCause.TIMEOUT


@pytest.mark.asyncio
async def test_srv_record_overrides_host_and_port(monkeypatch: pytest.MonkeyPatch) -> None:
    queried = []

    async def fake_resolve(qname: str, rdtype: str, lifetime: float):
        queried.append((qname, rdtype))
        return [
            SimpleNamespace(priority=10, weight=5, port=25599, target=dns.name.from_text("backup.example.com.")),
            SimpleNamespace(priority=5, weight=5, port=25580, target=dns.name.from_text("node.example.com.")),
        ]

    monkeypatch.setattr(dns.asyncresolver, "resolve", fake_resolve)

    assert await JavaStatusChecker().resolve_srv("example.com", 25565, 1.0) == ("node.example.com", 25580)
    assert queried == [("_minecraft._tcp.example.com", "SRV")]


@pytest.mark.asyncio
async def test_missing_srv_record_keeps_host(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_resolve(qname: str, rdtype: str, lifetime: float):
        raise dns.resolver.NXDOMAIN()

    monkeypatch.setattr(dns.asyncresolver, "resolve", fake_resolve)

    assert await JavaStatusChecker().resolve_srv("example.com", 25565, 1.0) == ("example.com", 25565)


@pytest.mark.asyncio
async def test_srv_lookup_skipped_for_ip_literals(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fail(*args: object, **kwargs: object):
        raise AssertionError("no lookup expected")

    monkeypatch.setattr(dns.asyncresolver, "resolve", fail)

    assert await JavaStatusChecker().resolve_srv("192.0.2.7", 25565, 1.0) == ("192.0.2.7", 25565)
    assert await JavaStatusChecker(enable_srv=False).resolve_srv("example.com", 1, 1.0) == ("example.com", 1)
