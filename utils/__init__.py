"""
Utility Package for Guild Status Bot

Logging setup, small helpers and input validators.
"""

from utils.logger import get_logger, setup_logging, log_execution_time
from utils.helpers import TimeHelper, StringHelper, DiscordHelper
from utils.reporting import ErrorReporter

__all__ = [
    "get_logger",
    "setup_logging",
    "log_execution_time",
    "TimeHelper",
    "StringHelper",
    "DiscordHelper",
    "ErrorReporter",
]
