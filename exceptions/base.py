"""
Base Exception Classes for Guild Status Bot

Every failure the bot knows how to describe derives from
GuildStatusException. Subclasses pick an error code, a log level
for the ErrorReporter and the text shown to the Discord user.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Type

from config.constants import ErrorCodes


class GuildStatusException(Exception):
    """
    Root of the Guild Status Bot exception hierarchy.

    Attributes:
        message: Text for operators and logs
        error_code: One of ``ErrorCodes``
        details: Context such as guild id, host or channel id
        cause: Platform or library exception this one wraps
        recoverable: False for errors that stop the process
        timestamp: UTC time the error was raised
    """

    default_error_code: int = ErrorCodes.UNKNOWN_ERROR
    default_recoverable: bool = True

    # Level the ErrorReporter logs this type at
    log_level: str = "ERROR"

    def __init__(
        self,
        message: str = "An error occurred",
        error_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
        recoverable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = dict(details or {})
        self.cause = cause
        self.recoverable = self.default_recoverable if recoverable is None else recoverable
        self.timestamp = datetime.now(timezone.utc)

        if cause is not None:
            self.__cause__ = cause

    def _put(self, **values: Any) -> None:
        """Record every non-empty value in ``details``."""
        for key, value in values.items():
            if value is not None and value != "":
                self.details[key] = value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "cause": repr(self.cause) if self.cause else None,
        }

    def log_format(self) -> str:
        """
        One-line rendering for log records:

            ProbeTimeoutError(4001) probe timed out | host=mc.example.com port=25565
        """
        line = f"{self.__class__.__name__}({self.error_code}) {self.message}"

        context = " ".join(f"{key}={value}" for key, value in self.details.items())
        if context:
            line += f" | {context}"
        if self.cause is not None:
            line += f" | cause={self.cause!r}"
        return line

    def user_message(self) -> str:
        """Text sent back to the member who ran the command."""
        return self.message

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, details={self.details})"


class ConfigurationError(GuildStatusException):
    """Settings are missing or invalid, e.g. no Discord token."""

    default_error_code = ErrorCodes.CONFIGURATION_ERROR
    default_recoverable = False

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[Type] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)
        self._put(
            config_key=config_key,
            expected_type=expected_type.__name__ if expected_type else None,
        )


class InitializationError(GuildStatusException):
    """A component was used before the application finished starting."""

    default_error_code = ErrorCodes.INITIALIZATION_ERROR
    default_recoverable = False

    def __init__(self, message: str, component: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self._put(component=component)
