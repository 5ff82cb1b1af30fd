"""
============================================================================
GUILD STATUS BOT - ERROR REPORTER
============================================================================
Single place where monitoring and storage failures are turned into log
records. Every record is bound with the guild, host and error code so the
console line and the JSON file sink carry the same context.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from collections import Counter
from typing import Any, Dict, Optional

from exceptions import GuildStatusException
from utils.logger import get_logger


class ErrorReporter:
    """
    Structured error-reporting collaborator.

    Components never log failures on their own; they hand them to
    ``report()`` (known exception types) or ``report_unexpected()``
    (anything else caught at a unit boundary).
    """

    def __init__(self, name: str = "Monitor"):
        self.logger = get_logger(name)
        self._counts: Counter = Counter()
        self._last_error: Optional[Dict[str, Any]] = None

    def report(
        self,
        error: GuildStatusException,
        *,
        guild_id: Optional[str] = None,
        host: Optional[str] = None,
    ) -> None:
        """Log a known failure at the level its type declares."""
        self._counts[error.__class__.__name__] += 1
        self._last_error = error.to_dict()

        bound = self.logger.bind(
            guild_id=guild_id or error.details.get("guild_id"),
            host=host or error.details.get("host"),
            error_code=error.error_code,
        )
        bound.log(error.log_level, f"{self._prefix(guild_id, host)}{error.log_format()}")

    def report_unexpected(
        self,
        error: BaseException,
        *,
        guild_id: Optional[str] = None,
        host: Optional[str] = None,
        where: str = "unit",
    ) -> None:
        """Log an exception nobody anticipated, with its traceback."""
        self._counts[error.__class__.__name__] += 1

        self.logger.bind(guild_id=guild_id, host=host).opt(exception=error).error(
            f"{self._prefix(guild_id, host)}Unexpected error in {where}: {error!r}"
        )

    @property
    def counts(self) -> Dict[str, int]:
        return dict(self._counts)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "total": sum(self._counts.values()),
            "by_type": self.counts,
            "last_error": self._last_error,
        }

    @staticmethod
    def _prefix(guild_id: Optional[str], host: Optional[str]) -> str:
        if guild_id and host:
            return f"[{guild_id}/{host}] "
        if guild_id:
            return f"[{guild_id}] "
        if host:
            return f"[{host}] "
        return ""
