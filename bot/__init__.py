"""
============================================================================
GUILD STATUS BOT - BOT PACKAGE
============================================================================
Discord client, slash commands and the adapters between discord.py and
the monitoring core.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from bot.registry import ServerRegistry
from bot.surface import DiscordGuild, DiscordChannelTarget
from bot.handlers import ServerCommands
from bot.client import StatusBot

__all__ = [
    "ServerRegistry",
    "DiscordGuild",
    "DiscordChannelTarget",
    "ServerCommands",
    "StatusBot",
]
