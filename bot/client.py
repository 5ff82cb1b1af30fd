"""
============================================================================
GUILD STATUS BOT - DISCORD CLIENT
============================================================================
discord.py bot: registers the command cog, syncs slash commands and arms
monitoring for every guild with configured servers once the gateway is
ready.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from typing import Optional

import discord
from discord.ext import commands

from bot.handlers import ServerCommands
from bot.registry import ServerRegistry
from bot.surface import DiscordGuild
from config.settings import Settings, get_settings
from utils.logger import get_logger


logger = get_logger("StatusBot")


class StatusBot(commands.Bot):
    """
    Discord client wired to the server registry.

    Created with ``max_ratelimit_timeout`` so a long channel-rename rate
    limit raises ``discord.RateLimited`` instead of parking a unit.
    """

    def __init__(self, registry: ServerRegistry, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.registry = registry

        intents = discord.Intents.default()
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
            max_ratelimit_timeout=self.settings.bot.max_ratelimit_timeout,
        )

    async def setup_hook(self) -> None:
        await self.add_cog(ServerCommands(self.registry))

        if not self.settings.bot.sync_commands:
            logger.info("Command sync disabled")
            return

        dev_guild_id = self.settings.bot.dev_guild_id
        if dev_guild_id:
            dev_guild = discord.Object(id=dev_guild_id)
            self.tree.copy_global_to(guild=dev_guild)
            synced = await self.tree.sync(guild=dev_guild)
            logger.info(f"✓ Synced {len(synced)} command(s) to dev guild {dev_guild_id}")

        synced = await self.tree.sync()
        logger.info(f"✓ Synced {len(synced)} global command(s)")

    async def on_ready(self) -> None:
        armed = self.registry.start_monitoring(DiscordGuild(guild) for guild in self.guilds)
        logger.info(
            f"✓ Logged in as {self.user} in {len(self.guilds)} guild(s), "
            f"monitoring {armed}"
        )

    async def on_guild_join(self, guild: discord.Guild) -> None:
        logger.info(f"Joined guild {guild.id} ({guild.name})")
        self.registry.start_monitoring([DiscordGuild(guild)])

    async def on_guild_remove(self, guild: discord.Guild) -> None:
        if self.registry.stop_monitoring(str(guild.id)):
            logger.info(f"Left guild {guild.id}, monitoring paused")
