from __future__ import annotations

import json

import pytest

from bot.registry import ServerRegistry
from config.constants import Defaults, MessageTemplates, ProtocolVariant
from config.settings import Settings
from exceptions import ConfigSaveFailed, InvalidHostError, InvalidPortError, ServerNotFoundError
from monitoring.scheduler import GuildMonitorScheduler
from storage.snapshot import ConfigSnapshot
from storage.store import ConfigStore
from tests.fakes import FakeGuild, FakeTarget, make_entry


@pytest.fixture()
def registry(
    snapshot: ConfigSnapshot, store: ConfigStore, scheduler: GuildMonitorScheduler, settings: Settings
):
    registry = ServerRegistry(snapshot, store, scheduler, settings=settings)
    yield registry
    scheduler.stop_all()


def _persisted(store: ConfigStore) -> dict:
    return json.loads(store.path.read_text(encoding="utf-8"))


@pytest.mark.asyncio
async def test_add_server_saves_and_arms(
    registry: ServerRegistry, store: ConfigStore, scheduler: GuildMonitorScheduler
) -> None:
    guild = FakeGuild("1", {"100": FakeTarget()})

    host, entry = await registry.add_server(guild, " MC.Example.com ", ProtocolVariant.JAVA, channel_id="100")

    assert host == "mc.example.com"
    assert entry.port == 25565
    assert entry.online_name == Defaults.ONLINE_NAME
    assert _persisted(store)["1"]["servers"]["mc.example.com"]["channelId"] == "100"
    assert scheduler.is_armed("1")


@pytest.mark.asyncio
async def test_add_server_accepts_host_with_port(registry: ServerRegistry) -> None:
    host, entry = await registry.add_server(
        FakeGuild("1"), "play.example.com:19133", ProtocolVariant.BEDROCK, channel_id="100"
    )

    assert (host, entry.port, entry.protocol) == ("play.example.com", 19133, ProtocolVariant.BEDROCK)


@pytest.mark.asyncio
async def test_invalid_input_changes_nothing(
    registry: ServerRegistry, snapshot: ConfigSnapshot, store: ConfigStore, scheduler: GuildMonitorScheduler
) -> None:
    with pytest.raises(InvalidHostError):
        await registry.add_server(FakeGuild("1"), "not a host!", ProtocolVariant.JAVA, channel_id="100")
    with pytest.raises(InvalidPortError):
        await registry.add_server(FakeGuild("1"), "mc.example.com", ProtocolVariant.JAVA, channel_id="100", port=0)

    assert "1" not in snapshot
    assert not store.path.exists()
    assert not scheduler.is_armed("1")


@pytest.mark.asyncio
async def test_failed_save_rolls_back_and_does_not_arm(
    registry: ServerRegistry,
    snapshot: ConfigSnapshot,
    store: ConfigStore,
    scheduler: GuildMonitorScheduler,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def failing_save(guilds) -> None:
        raise ConfigSaveFailed(path=store.path)

    monkeypatch.setattr(store, "save", failing_save)

    with pytest.raises(ConfigSaveFailed) as excinfo:
        await registry.add_server(FakeGuild("1"), "mc.example.com", ProtocolVariant.JAVA, channel_id="100")

    assert excinfo.value.user_message() == MessageTemplates.SAVE_FAILED
    assert snapshot.servers("1") == {}
    assert not scheduler.is_armed("1")


@pytest.mark.asyncio
async def test_failed_save_on_remove_keeps_entry(
    registry: ServerRegistry, snapshot: ConfigSnapshot, store: ConfigStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    await registry.add_server(FakeGuild("1"), "mc.example.com", ProtocolVariant.JAVA, channel_id="100")

    async def failing_save(guilds) -> None:
        raise ConfigSaveFailed(path=store.path)

    monkeypatch.setattr(store, "save", failing_save)

    with pytest.raises(ConfigSaveFailed):
        await registry.remove_server("1", "mc.example.com")

    assert list(snapshot.servers("1")) == ["mc.example.com"]


@pytest.mark.asyncio
async def test_removing_last_server_stops_guild_and_drops_key(
    registry: ServerRegistry, snapshot: ConfigSnapshot, store: ConfigStore, scheduler: GuildMonitorScheduler
) -> None:
    guild = FakeGuild("1")
    await registry.add_server(guild, "a.example.com", ProtocolVariant.JAVA, channel_id="100")
    await registry.add_server(guild, "b.example.com", ProtocolVariant.JAVA, channel_id="200")

    await registry.remove_server("1", "a.example.com")
    assert scheduler.is_armed("1")
    assert list(_persisted(store)["1"]["servers"]) == ["b.example.com"]

    key, removed = await registry.remove_server("1", "B.example.com.")

    assert key == "b.example.com"
    assert removed.channel_id == "200"
    assert not scheduler.is_armed("1")
    assert "1" not in snapshot
    assert _persisted(store) == {}


@pytest.mark.asyncio
async def test_removing_unknown_host_raises(registry: ServerRegistry, store: ConfigStore) -> None:
    with pytest.raises(ServerNotFoundError) as excinfo:
        await registry.remove_server("1", "nope.example.com")

    assert excinfo.value.user_message() == "Not found!"
    assert not store.path.exists()


def test_matching_hosts_is_case_insensitive_and_capped(registry: ServerRegistry, snapshot: ConfigSnapshot) -> None:
    for i in range(30):
        snapshot.put_server("1", f"node{i:02d}.example.com", make_entry())
    snapshot.put_server("1", "lobby.other.net", make_entry())

    assert registry.matching_hosts("1", "OTHER") == ["lobby.other.net"]
    assert len(registry.matching_hosts("1", "")) == 25
    assert registry.matching_hosts("2", "") == []


def test_list_servers_is_sorted(registry: ServerRegistry, snapshot: ConfigSnapshot) -> None:
    snapshot.put_server("1", "b.example.com", make_entry())
    snapshot.put_server("1", "a.example.com", make_entry())

    assert [host for host, _ in registry.list_servers("1")] == ["a.example.com", "b.example.com"]


@pytest.mark.asyncio
async def test_start_monitoring_only_arms_configured_guilds(
    registry: ServerRegistry, snapshot: ConfigSnapshot, scheduler: GuildMonitorScheduler
) -> None:
    snapshot.put_server("1", "a.example.com", make_entry())

    armed = registry.start_monitoring([FakeGuild("1"), FakeGuild("2")])

    assert armed == 1
    assert scheduler.active_guild_ids() == ["1"]
    assert registry.stop_monitoring("1") is True


@pytest.mark.asyncio
async def test_refresh_runs_one_cycle(registry: ServerRegistry, snapshot: ConfigSnapshot) -> None:
    snapshot.put_server("1", "a.example.com", make_entry())
    guild = FakeGuild("1", {"100": FakeTarget()})

    summary = await registry.refresh(guild)

    assert summary.updated == 1
    assert guild.targets["100"].label == "Online | 5/20"
