from __future__ import annotations

import asyncio

import pytest

from config.constants import ProtocolVariant
from monitoring.prober import StatusProber
from monitoring.reconciler import LabelReconciler
from monitoring.scheduler import GuildMonitorScheduler
from storage.snapshot import ConfigSnapshot
from tests.fakes import FakeChecker, FakeGuild, FakeTarget, make_entry, wait_until
from utils.reporting import ErrorReporter


@pytest.mark.asyncio
async def test_guild_without_servers_does_nothing(
    scheduler: GuildMonitorScheduler, checker: FakeChecker
) -> None:
    guild = FakeGuild("1", {"100": FakeTarget()})

    summary = await scheduler.run_cycle(guild)

    assert summary.total == 0
    assert checker.calls == []
    assert guild.resolved == []
    assert guild.targets["100"].writes == []


@pytest.mark.asyncio
async def test_cycle_updates_every_server(
    scheduler: GuildMonitorScheduler, snapshot: ConfigSnapshot, checker: FakeChecker
) -> None:
    snapshot.put_server("1", "a.example.com", make_entry(channel_id="100"))
    snapshot.put_server("1", "b.example.com", make_entry(channel_id="200"))
    checker.answers["b.example.com"] = ConnectionRefusedError(111, "refused")
    guild = FakeGuild("1", {"100": FakeTarget("100"), "200": FakeTarget("200", label="Offline")})

    summary = await scheduler.run_cycle(guild)

    assert (summary.updated, summary.skipped, summary.errored) == (1, 1, 0)
    assert guild.targets["100"].label == "Online | 5/20"
    assert guild.targets["200"].writes == []


@pytest.mark.asyncio
async def test_failing_unit_does_not_affect_siblings(
    scheduler: GuildMonitorScheduler, snapshot: ConfigSnapshot, reporter: ErrorReporter
) -> None:
    snapshot.put_server("1", "gone.example.com", make_entry(channel_id="999"))
    snapshot.put_server("1", "boom.example.com", make_entry(channel_id="300"))
    snapshot.put_server("1", "ok.example.com", make_entry(channel_id="100"))
    guild = FakeGuild(
        "1",
        {
            "100": FakeTarget("100"),
            "300": FakeTarget("300", fail_on={"Online | 5/20": RuntimeError("boom"), "Offline": RuntimeError("boom")}),
        },
    )

    summary = await scheduler.run_cycle(guild)

    assert (summary.updated, summary.errored) == (1, 2)
    assert guild.targets["100"].label == "Online | 5/20"
    assert reporter.counts["TargetNotFound"] == 1
    assert reporter.counts["RuntimeError"] == 1


@pytest.mark.asyncio
async def test_unexpected_prober_error_is_reported(
    snapshot: ConfigSnapshot, reconciler: LabelReconciler, reporter: ErrorReporter, settings
) -> None:
    class BrokenProber:
        async def probe(self, host, entry, overall_timeout=None):
            raise KeyError(host)

    snapshot.put_server("1", "a.example.com", make_entry())
    scheduler = GuildMonitorScheduler(snapshot, BrokenProber(), reconciler, reporter=reporter, settings=settings)

    summary = await scheduler.run_cycle(FakeGuild("1", {"100": FakeTarget()}))

    assert summary.errored == 1
    assert reporter.counts == {"KeyError": 1}


@pytest.mark.asyncio
async def test_probe_failures_are_reported_and_shown_offline(
    scheduler: GuildMonitorScheduler, snapshot: ConfigSnapshot, checker: FakeChecker, reporter: ErrorReporter
) -> None:
    snapshot.put_server("1", "down.example.com", make_entry())
    checker.default = OSError("Received invalid status response packet.")
    guild = FakeGuild("1", {"100": FakeTarget(label="Online | 5/20")})

    summary = await scheduler.run_cycle(guild)

    assert summary.updated == 1
    assert guild.targets["100"].label == "Offline"
    assert reporter.counts == {"ProbeProtocolError": 1}


@pytest.mark.asyncio
async def test_start_runs_a_cycle_immediately(
    scheduler: GuildMonitorScheduler, snapshot: ConfigSnapshot
) -> None:
    snapshot.put_server("1", "a.example.com", make_entry())
    guild = FakeGuild("1", {"100": FakeTarget()})

    handle = scheduler.start(guild)
    try:
        await wait_until(lambda: handle.cycle_count == 1)
        assert guild.targets["100"].label == "Online | 5/20"
        assert handle.last_summary.updated == 1
        assert scheduler.is_armed("1")
    finally:
        await scheduler.shutdown(timeout=1)


@pytest.mark.asyncio
async def test_start_twice_keeps_one_timer(
    scheduler: GuildMonitorScheduler, snapshot: ConfigSnapshot
) -> None:
    snapshot.put_server("1", "a.example.com", make_entry())
    guild = FakeGuild("1", {"100": FakeTarget()})

    first = scheduler.start(guild)
    second = scheduler.start(guild)
    try:
        await wait_until(lambda: first.task.done())

        assert first.task.cancelled()
        assert second.active
        assert scheduler.active_guild_ids() == ["1"]
        assert len(scheduler.get_stats()["guilds"]) == 1
    finally:
        await scheduler.shutdown(timeout=1)


@pytest.mark.asyncio
async def test_stop_disarms_and_is_idempotent(scheduler: GuildMonitorScheduler) -> None:
    handle = scheduler.start(FakeGuild("1"))

    assert scheduler.stop("1") is True
    assert scheduler.stop("1") is False
    await wait_until(lambda: handle.task.done())
    assert not scheduler.is_armed("1")
    assert scheduler.active_guild_ids() == []


@pytest.mark.asyncio
async def test_shutdown_waits_for_in_flight_cycles(
    settings, snapshot: ConfigSnapshot, reconciler: LabelReconciler, reporter: ErrorReporter
) -> None:
    slow = FakeChecker(delay=0.05)
    prober = StatusProber(settings=settings, checkers={ProtocolVariant.JAVA: slow})
    scheduler = GuildMonitorScheduler(snapshot, prober, reconciler, reporter=reporter, settings=settings)
    snapshot.put_server("1", "a.example.com", make_entry())
    guild = FakeGuild("1", {"100": FakeTarget()})

    handle = scheduler.start(guild)
    await wait_until(lambda: scheduler.in_flight_cycles == 1)
    await scheduler.shutdown(timeout=1)

    assert handle.cycle_count == 1
    assert guild.targets["100"].label == "Online | 5/20"
    assert scheduler.in_flight_cycles == 0
    assert not scheduler.is_armed("1")


@pytest.mark.asyncio
async def test_cycle_reads_a_copy_of_the_guild(
    scheduler: GuildMonitorScheduler, snapshot: ConfigSnapshot, checker: FakeChecker
) -> None:
    snapshot.put_server("1", "a.example.com", make_entry())
    checker.delay = 0.02
    guild = FakeGuild("1", {"100": FakeTarget()})

    cycle = asyncio.create_task(scheduler.run_cycle(guild))
    await wait_until(lambda: len(checker.calls) == 1)
    snapshot.remove_server("1", "a.example.com")
    summary = await cycle

    assert summary.updated == 1
    assert "1" not in snapshot
