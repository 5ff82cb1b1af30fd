from __future__ import annotations

from types import SimpleNamespace
from typing import Optional

import discord
import pytest

from bot.surface import DiscordChannelTarget, DiscordGuild, can_rename
from exceptions import LabelWriteFailed, TargetNotFound, TargetUnmanageable


ME = SimpleNamespace(id=42)


def _response(status: int) -> SimpleNamespace:
    return SimpleNamespace(status=status, reason="error")


class StubChannel:
    def __init__(
        self,
        channel_id: int = 100,
        channel_type: discord.ChannelType = discord.ChannelType.voice,
        error: Optional[BaseException] = None,
        owner_id: int = 1,
        **perms: bool,
    ) -> None:
        self.id = channel_id
        self.name = "Offline"
        self.type = channel_type
        self.guild = SimpleNamespace(id=7, me=ME, owner_id=owner_id)
        self.perms = discord.Permissions(**perms)
        self.error = error
        self.edits = []

    def permissions_for(self, member: object) -> discord.Permissions:
        return self.perms

    async def edit(self, *, name: str, reason: str) -> None:
        self.edits.append(name)
        if self.error is not None:
            raise self.error
        self.name = name


class StubGuild:
    def __init__(self, channels: Optional[dict] = None, fetch_error: Optional[BaseException] = None) -> None:
        self.id = 7
        self.name = "guild"
        self.me = ME
        self.channels = channels or {}
        self.fetch_error = fetch_error

    @property
    def voice_channels(self) -> list:
        return list(self.channels.values())

    def get_channel(self, channel_id: int):
        return self.channels.get(channel_id)

    async def fetch_channel(self, channel_id: int):
        raise self.fetch_error


def test_voice_channel_needs_connect_as_well() -> None:
    assert not can_rename(StubChannel(manage_channels=True, connect=False))
    assert can_rename(StubChannel(manage_channels=True, connect=True))
    assert not can_rename(StubChannel(connect=True))


def test_text_channel_needs_view_channel() -> None:
    text = discord.ChannelType.text

    assert not can_rename(StubChannel(channel_type=text, manage_channels=True, view_channel=False))
    assert can_rename(StubChannel(channel_type=text, manage_channels=True, view_channel=True))


def test_owner_and_administrator_may_always_rename() -> None:
    assert can_rename(StubChannel(owner_id=ME.id))
    assert can_rename(StubChannel(administrator=True))


def test_first_manageable_voice_channel_skips_channels_without_connect() -> None:
    blocked = StubChannel(channel_id=1, manage_channels=True)
    usable = StubChannel(channel_id=2, manage_channels=True, connect=True)

    guild = DiscordGuild(StubGuild({1: blocked, 2: usable}))

    assert guild.first_manageable_voice_channel() is usable


@pytest.mark.asyncio
async def test_set_label_renames_channel() -> None:
    channel = StubChannel(manage_channels=True, connect=True)
    target = DiscordChannelTarget(channel)

    await target.set_label("Online | 1/20")

    assert await target.get_current_label() == "Online | 1/20"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (discord.RateLimited(120.0), LabelWriteFailed),
        (discord.HTTPException(_response(500), "server error"), LabelWriteFailed),
        (discord.Forbidden(_response(403), "missing access"), TargetUnmanageable),
        (discord.NotFound(_response(404), "unknown channel"), TargetNotFound),
    ],
)
async def test_set_label_translates_platform_errors(error: BaseException, expected: type) -> None:
    target = DiscordChannelTarget(StubChannel(error=error))

    with pytest.raises(expected) as excinfo:
        await target.set_label("Offline | Server down")

    assert excinfo.value.details["target_id"] == "100"
    assert excinfo.value.cause is error


@pytest.mark.asyncio
async def test_rate_limit_keeps_retry_after() -> None:
    target = DiscordChannelTarget(StubChannel(error=discord.RateLimited(300.0)))

    with pytest.raises(LabelWriteFailed) as excinfo:
        await target.set_label("x")

    assert excinfo.value.retry_after == 300.0


@pytest.mark.asyncio
async def test_resolve_target_prefers_cache() -> None:
    channel = StubChannel()

    target = await DiscordGuild(StubGuild({100: channel})).resolve_target("100")

    assert target.channel is channel


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (discord.NotFound(_response(404), "unknown channel"), TargetNotFound),
        (discord.Forbidden(_response(403), "missing access"), TargetNotFound),
        (discord.HTTPException(_response(502), "bad gateway"), LabelWriteFailed),
    ],
)
async def test_resolve_target_translates_lookup_errors(error: BaseException, expected: type) -> None:
    guild = DiscordGuild(StubGuild(fetch_error=error))

    with pytest.raises(expected):
        await guild.resolve_target("100")


@pytest.mark.asyncio
async def test_resolve_target_rejects_malformed_id() -> None:
    with pytest.raises(TargetNotFound):
        await DiscordGuild(StubGuild()).resolve_target("not-a-snowflake")
