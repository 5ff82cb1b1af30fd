"""
============================================================================
GUILD STATUS BOT - HELPERS UTILITY
============================================================================
Small formatting helpers shared by labels, replies and the health
endpoint.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from datetime import datetime, timezone
from typing import Mapping, Union

from config.constants import Limits


# ============================================================================
# TIME UTILITIES
# ============================================================================

class TimeHelper:

    @staticmethod
    def get_utc_now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def seconds_to_human_readable(seconds: Union[int, float]) -> str:
        """
        Uptime as ``"2d 3h 4m 5s"``; zero units are left out.

        >>> TimeHelper.seconds_to_human_readable(3725)
        '1h 2m 5s'
        """
        remaining = max(int(seconds), 0)
        parts = []
        for unit, size in (("d", 86400), ("h", 3600), ("m", 60)):
            count, remaining = divmod(remaining, size)
            if count:
                parts.append(f"{count}{unit}")
        if remaining or not parts:
            parts.append(f"{remaining}s")
        return " ".join(parts)


# ============================================================================
# STRING UTILITIES
# ============================================================================

class StringHelper:

    @staticmethod
    def truncate(text: str, max_length: int = Limits.CHANNEL_NAME_MAX, suffix: str = "...") -> str:
        """
        Cut *text* to *max_length* characters, ending in *suffix* when
        there is room for it.
        """
        if len(text) <= max_length:
            return text
        if len(suffix) >= max_length:
            return text[:max_length]
        return text[:max_length - len(suffix)] + suffix

    @staticmethod
    def substitute(template: str, values: Mapping[str, object]) -> str:
        """
        Replace each ``{key}`` of *values* in *template*.

        Braces that name no key stay as they are, so a label such as
        ``"{motd} up"`` never raises the way ``str.format`` would.
        """
        for key, value in values.items():
            template = template.replace("{" + key + "}", str(value))
        return template


# ============================================================================
# DISCORD UTILITIES
# ============================================================================

class DiscordHelper:

    @staticmethod
    def clamp_message(text: str) -> str:
        """Keep a reply within Discord's message length limit."""
        return StringHelper.truncate(text, Limits.MAX_MESSAGE_LENGTH, suffix="\n…")
