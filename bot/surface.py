"""
============================================================================
GUILD STATUS BOT - DISCORD RENDERING SURFACE
============================================================================
Adapters between discord.py objects and the monitoring core:

    DiscordGuild          → GuildHandle   (resolve a channel id to a target)
    DiscordChannelTarget  → LabelTarget   (read / rename a voice channel)

Platform errors are translated into the monitoring exception hierarchy
here, so nothing above this module imports discord.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from typing import Optional

import discord

from config.constants import Defaults
from exceptions import LabelWriteFailed, TargetNotFound, TargetUnmanageable


def can_rename(channel: discord.abc.GuildChannel) -> bool:
    """
    Whether the bot may rename *channel*: Manage Channels plus Connect on
    voice channels, View Channel on the others. Owner and administrators
    always may.
    """
    guild = channel.guild
    me = guild.me
    if me is None:
        return False
    if guild.owner_id == me.id:
        return True

    perms = channel.permissions_for(me)
    if perms.administrator:
        return True
    if channel.type in (discord.ChannelType.voice, discord.ChannelType.stage_voice):
        return perms.manage_channels and perms.connect
    return perms.manage_channels and perms.view_channel


class DiscordChannelTarget:
    """
    A guild channel whose name shows a server's status.
    """

    def __init__(self, channel: discord.abc.GuildChannel, reason: str = Defaults.RENAME_REASON):
        self.channel = channel
        self.id = str(channel.id)
        self.reason = reason

    def is_manageable(self) -> bool:
        return can_rename(self.channel)

    async def get_current_label(self) -> str:
        # The gateway keeps the cached channel in sync with renames
        return self.channel.name

    async def set_label(self, label: str) -> None:
        guild_id = str(self.channel.guild.id)
        try:
            await self.channel.edit(name=label, reason=self.reason)
        except discord.RateLimited as e:
            raise LabelWriteFailed(
                f"Rename rate limited for {e.retry_after:.0f}s",
                retry_after=e.retry_after,
                target_id=self.id,
                guild_id=guild_id,
                cause=e,
            )
        except discord.NotFound as e:
            raise TargetNotFound(target_id=self.id, guild_id=guild_id, cause=e)
        except discord.Forbidden as e:
            raise TargetUnmanageable(target_id=self.id, guild_id=guild_id, cause=e)
        except discord.HTTPException as e:
            raise LabelWriteFailed(
                f"Rename failed with HTTP {e.status}",
                target_id=self.id,
                guild_id=guild_id,
                cause=e,
            )

    def __repr__(self) -> str:
        return f"DiscordChannelTarget(id={self.id}, name={self.channel.name!r})"


class DiscordGuild:
    """
    A guild as seen by the scheduler.
    """

    def __init__(self, guild: discord.Guild):
        self.guild = guild
        self.id = str(guild.id)

    @property
    def name(self) -> str:
        return self.guild.name

    async def resolve_target(self, channel_id: str) -> DiscordChannelTarget:
        """
        Look the channel up in the cache, then through the API.

        Raises:
            TargetNotFound: the channel was deleted or is not visible
            LabelWriteFailed: the lookup itself failed
        """
        try:
            snowflake = int(channel_id)
        except (TypeError, ValueError) as e:
            raise TargetNotFound(
                f"Invalid channel id {channel_id!r}", target_id=str(channel_id), guild_id=self.id, cause=e
            )

        channel = self.guild.get_channel(snowflake)
        if channel is None:
            try:
                channel = await self.guild.fetch_channel(snowflake)
            except (discord.NotFound, discord.Forbidden) as e:
                raise TargetNotFound(target_id=str(channel_id), guild_id=self.id, cause=e)
            except discord.HTTPException as e:
                raise LabelWriteFailed(
                    f"Channel lookup failed with HTTP {e.status}",
                    target_id=str(channel_id),
                    guild_id=self.id,
                    cause=e,
                )

        return DiscordChannelTarget(channel)

    def first_manageable_voice_channel(self) -> Optional[discord.VoiceChannel]:
        return next((c for c in self.guild.voice_channels if can_rename(c)), None)

    def __repr__(self) -> str:
        return f"DiscordGuild(id={self.id}, name={self.guild.name!r})"
