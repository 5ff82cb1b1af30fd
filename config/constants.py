"""
Constants Module for Guild Status Bot

Contains all constant values, enumerations, templates, and
static configuration used throughout the application.
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class BotCommands(str, Enum):
    """
    Bot Commands Enumeration

    Slash commands registered by the bot. All of them are guild-only
    and require the Manage Channels permission.
    """

    ADD_SERVER = "addserver"
    REMOVE_SERVER = "removeserver"
    LIST = "list"
    STATUS = "status"

    @classmethod
    def get_description(cls, command: "BotCommands") -> str:
        """Get command description."""
        descriptions = {
            cls.ADD_SERVER: "Add a Minecraft server",
            cls.REMOVE_SERVER: "Remove a server",
            cls.LIST: "List servers",
            cls.STATUS: "Force update",
        }
        return descriptions.get(command, "No description available")


class ProtocolVariant(str, Enum):
    """
    Wire protocol used to query a server.

    JAVA is the Server List Ping over TCP, BEDROCK the RakNet
    unconnected ping over UDP.
    """

    JAVA = "java"
    BEDROCK = "bedrock"

    @property
    def default_port(self) -> int:
        if self is ProtocolVariant.BEDROCK:
            return Defaults.BEDROCK_PORT
        return Defaults.JAVA_PORT

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class ProbeCause(str, Enum):
    """Classification of a failed probe."""

    TIMEOUT = "timeout"
    NETWORK = "network"
    PROTOCOL = "protocol"


class MessageTemplates:
    """
    Message Templates for Bot Responses

    Replies are sent ephemerally, so they stay short and use
    Discord markdown.
    """

    GUILD_ONLY: Final[str] = "This command must be used in a guild."
    MISSING_PERMISSION: Final[str] = "You need **Manage Channels** permission!"
    NO_CHANNEL: Final[str] = "No voice channel provided and none found that is manageable."
    CHANNEL_NOT_MANAGEABLE: Final[str] = "I can't rename {channel}. Give me **Manage Channels** there first."

    SERVER_ADDED: Final[str] = "Monitoring **{host}:{port}** ({protocol})\nStatus channel: {channel}"
    SERVER_REMOVED: Final[str] = "Stopped monitoring `{host}`"
    SERVER_NOT_FOUND: Final[str] = "Not found!"
    SERVER_LIST_HEADER: Final[str] = "**Servers:**\n{servers}"
    SERVER_LIST_ITEM: Final[str] = "• `{host}:{port}` ({protocol}) → <#{channel_id}>"
    SERVER_LIST_EMPTY: Final[str] = "None"

    STATUS_UPDATED: Final[str] = "Updated! ({updated} renamed, {skipped} unchanged, {errored} failed)"
    STATUS_NOTHING: Final[str] = "No servers configured for this guild."

    SAVE_FAILED: Final[str] = "Could not save the configuration. Nothing was changed."
    GENERIC_ERROR: Final[str] = "An error occurred. Check logs."


class Limits:
    """
    Application Limits and Constraints
    """

    # Discord limits
    CHANNEL_NAME_MAX: Final[int] = 100
    AUTOCOMPLETE_CHOICES: Final[int] = 25
    MAX_MESSAGE_LENGTH: Final[int] = 2000

    # Input limits
    MAX_HOST_LENGTH: Final[int] = 253
    MAX_TEMPLATE_LENGTH: Final[int] = 100
    MIN_PORT: Final[int] = 1
    MAX_PORT: Final[int] = 65535


class Defaults:
    """
    Default Values
    """

    # Ports
    JAVA_PORT: Final[int] = 25565
    BEDROCK_PORT: Final[int] = 19132

    # Label templates
    ONLINE_NAME: Final[str] = "Online | {online}/{max} players"
    OFFLINE_NAME: Final[str] = "Offline | Server down"

    # Timing
    CHECK_INTERVAL: Final[int] = 60
    PROBE_TIMEOUT: Final[float] = 5.0
    PROBE_DEADLINE: Final[float] = 7.0

    # SRV
    SRV_SERVICE: Final[str] = "_minecraft._tcp"

    # Audit log reason attached to channel renames
    RENAME_REASON: Final[str] = "Server status update"


class ErrorCodes:
    """Application error codes."""

    # General errors (1xxx)
    UNKNOWN_ERROR: Final[int] = 1000
    CONFIGURATION_ERROR: Final[int] = 1100
    INITIALIZATION_ERROR: Final[int] = 1200

    # Storage errors (2xxx)
    STORAGE_ERROR: Final[int] = 2000
    CONFIG_LOAD_DEGRADED: Final[int] = 2001
    CONFIG_SAVE_FAILED: Final[int] = 2002

    # Validation errors (3xxx)
    VALIDATION_ERROR: Final[int] = 3000
    INVALID_HOST: Final[int] = 3001
    INVALID_PORT: Final[int] = 3002
    INVALID_TEMPLATE: Final[int] = 3003
    SERVER_NOT_FOUND: Final[int] = 3004

    # Probe errors (40xx)
    MONITORING_ERROR: Final[int] = 4000
    PROBE_TIMEOUT: Final[int] = 4001
    PROBE_NETWORK: Final[int] = 4002
    PROBE_PROTOCOL: Final[int] = 4003

    # Label errors (41xx)
    TARGET_UNMANAGEABLE: Final[int] = 4101
    TARGET_NOT_FOUND: Final[int] = 4102
    LABEL_WRITE_FAILED: Final[int] = 4103
