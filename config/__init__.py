"""
Configuration Package for Guild Status Bot

This package contains all configuration-related modules including:
- Settings management with environment variable support
- Constants and enums used throughout the application
"""

from config.settings import (
    Settings,
    BotSettings,
    MonitoringSettings,
    StorageSettings,
    LoggingSettings,
    Environment,
    LogLevel,
    get_settings,
)

from config.constants import (
    BotCommands,
    ProtocolVariant,
    ProbeCause,
    MessageTemplates,
    Limits,
    Defaults,
    ErrorCodes,
)

__all__ = [
    # Settings
    "Settings",
    "BotSettings",
    "MonitoringSettings",
    "StorageSettings",
    "LoggingSettings",
    "Environment",
    "LogLevel",
    "get_settings",

    # Constants
    "BotCommands",
    "ProtocolVariant",
    "ProbeCause",
    "MessageTemplates",
    "Limits",
    "Defaults",
    "ErrorCodes",
]
