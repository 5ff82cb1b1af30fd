"""
============================================================================
GUILD STATUS BOT - BOT HANDLERS
============================================================================
Slash command handlers:

    /addserver     host type [port] [channel] [online_name] [offline_name]
    /removeserver  host (autocomplete)
    /list
    /status

All commands are guild-only and require Manage Channels. Replies are
ephemeral; failures are answered to the requester and logged.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from typing import List, Optional, Tuple

import discord
from discord import app_commands
from discord.ext import commands

from bot.registry import ServerRegistry
from bot.surface import DiscordChannelTarget, DiscordGuild
from config.constants import BotCommands, MessageTemplates, ProtocolVariant
from exceptions import GuildStatusException
from storage.models import ServerEntry
from utils.helpers import DiscordHelper, StringHelper
from utils.logger import get_logger


logger = get_logger("Handlers")


PROTOCOL_CHOICES = [
    app_commands.Choice(name=variant.display_name, value=variant.value)
    for variant in ProtocolVariant
]


# ============================================================================
# HELPERS
# ============================================================================

class BotHelpers:
    """Reply formatting shared by the command handlers."""

    @staticmethod
    def format_server_list(servers: List[Tuple[str, ServerEntry]]) -> str:
        if not servers:
            body = MessageTemplates.SERVER_LIST_EMPTY
        else:
            body = "\n".join(
                MessageTemplates.SERVER_LIST_ITEM.format(
                    host=host,
                    port=entry.port,
                    protocol=entry.protocol.display_name,
                    channel_id=entry.channel_id,
                )
                for host, entry in servers
            )
        return DiscordHelper.clamp_message(MessageTemplates.SERVER_LIST_HEADER.format(servers=body))

    @staticmethod
    async def reply(interaction: discord.Interaction, content: str) -> None:
        content = DiscordHelper.clamp_message(content)
        if interaction.response.is_done():
            await interaction.followup.send(content, ephemeral=True)
        else:
            await interaction.response.send_message(content, ephemeral=True)


# ============================================================================
# COMMANDS
# ============================================================================

class ServerCommands(commands.Cog):
    """Manage the Minecraft servers shown in this guild's channels."""

    def __init__(self, registry: ServerRegistry):
        self.registry = registry

    @app_commands.command(
        name=BotCommands.ADD_SERVER.value,
        description=BotCommands.get_description(BotCommands.ADD_SERVER),
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.checks.has_permissions(manage_channels=True)
    @app_commands.rename(server_type="type")
    @app_commands.describe(
        host="IP/domain",
        server_type="Java or Bedrock",
        port="Port (defaults to 25565 for Java, 19132 for Bedrock)",
        channel="Voice channel to rename (defaults to the first one I can manage)",
        online_name="Label when online, may use {online} and {max}",
        offline_name="Label when offline",
    )
    @app_commands.choices(server_type=PROTOCOL_CHOICES)
    async def addserver(
        self,
        interaction: discord.Interaction,
        host: str,
        server_type: app_commands.Choice[str],
        port: Optional[int] = None,
        channel: Optional[discord.VoiceChannel] = None,
        online_name: Optional[str] = None,
        offline_name: Optional[str] = None,
    ) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        guild = DiscordGuild(interaction.guild)

        if channel is None:
            channel = guild.first_manageable_voice_channel()
            if channel is None:
                await BotHelpers.reply(interaction, MessageTemplates.NO_CHANNEL)
                return
        elif not DiscordChannelTarget(channel).is_manageable():
            await BotHelpers.reply(
                interaction,
                MessageTemplates.CHANNEL_NOT_MANAGEABLE.format(channel=channel.mention),
            )
            return

        host, entry = await self.registry.add_server(
            guild,
            host,
            ProtocolVariant(server_type.value),
            channel_id=str(channel.id),
            port=port,
            online_name=online_name,
            offline_name=offline_name,
        )

        await BotHelpers.reply(
            interaction,
            MessageTemplates.SERVER_ADDED.format(
                host=host,
                port=entry.port,
                protocol=entry.protocol.display_name,
                channel=channel.mention,
            ),
        )

    @app_commands.command(
        name=BotCommands.REMOVE_SERVER.value,
        description=BotCommands.get_description(BotCommands.REMOVE_SERVER),
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.checks.has_permissions(manage_channels=True)
    @app_commands.describe(host="Host")
    async def removeserver(self, interaction: discord.Interaction, host: str) -> None:
        removed_host, _ = await self.registry.remove_server(str(interaction.guild_id), host)
        await BotHelpers.reply(interaction, MessageTemplates.SERVER_REMOVED.format(host=removed_host))

    @removeserver.autocomplete("host")
    async def removeserver_host_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> List[app_commands.Choice[str]]:
        if interaction.guild_id is None:
            return []
        hosts = self.registry.matching_hosts(str(interaction.guild_id), current)
        return [
            app_commands.Choice(name=StringHelper.truncate(host, 100), value=host)
            for host in hosts
        ]

    @app_commands.command(
        name=BotCommands.LIST.value,
        description=BotCommands.get_description(BotCommands.LIST),
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.checks.has_permissions(manage_channels=True)
    async def list_servers(self, interaction: discord.Interaction) -> None:
        servers = self.registry.list_servers(str(interaction.guild_id))
        await BotHelpers.reply(interaction, BotHelpers.format_server_list(servers))

    @app_commands.command(
        name=BotCommands.STATUS.value,
        description=BotCommands.get_description(BotCommands.STATUS),
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.checks.has_permissions(manage_channels=True)
    async def status(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)

        summary = await self.registry.refresh(DiscordGuild(interaction.guild))
        if summary.total == 0:
            await BotHelpers.reply(interaction, MessageTemplates.STATUS_NOTHING)
            return

        await BotHelpers.reply(
            interaction,
            MessageTemplates.STATUS_UPDATED.format(
                updated=summary.updated,
                skipped=summary.skipped,
                errored=summary.errored,
            ),
        )

    # ------------------------------------------------------------------
    # ERRORS
    # ------------------------------------------------------------------

    async def cog_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError,
    ) -> None:
        original = error.original if isinstance(error, app_commands.CommandInvokeError) else error
        command = interaction.command.name if interaction.command else "?"

        if isinstance(original, GuildStatusException):
            logger.bind(guild_id=interaction.guild_id, error_code=original.error_code).log(
                original.log_level, f"[/{command}] {original.log_format()}"
            )
            message = original.user_message()
        elif isinstance(original, app_commands.MissingPermissions):
            message = MessageTemplates.MISSING_PERMISSION
        elif isinstance(original, app_commands.NoPrivateMessage):
            message = MessageTemplates.GUILD_ONLY
        else:
            logger.opt(exception=original).error(f"[/{command}] Unhandled error: {original!r}")
            message = MessageTemplates.GENERIC_ERROR

        try:
            await BotHelpers.reply(interaction, message)
        except discord.HTTPException as e:
            logger.warning(f"[/{command}] Could not deliver error reply: {e}")
