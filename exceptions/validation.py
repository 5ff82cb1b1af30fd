"""
Validation Exception Classes for Guild Status Bot

Provides specialized exceptions for command input validation:
hosts, ports, label templates and unknown servers.
"""

from __future__ import annotations

from typing import Any, List, Optional

from config.constants import ErrorCodes, Limits, MessageTemplates
from exceptions.base import GuildStatusException


class ValidationException(GuildStatusException):
    """
    Rejected slash command input. Nothing is changed when one of
    these is raised; the member gets ``user_message()`` back.
    """

    default_error_code = ErrorCodes.VALIDATION_ERROR
    log_level = "WARNING"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)
        self._put(field=field, value=None if value is None else self._clip(value))

    @staticmethod
    def _clip(value: Any, limit: int = 100) -> str:
        """Member input as a log-safe string of bounded length."""
        text = str(value)
        return text if len(text) <= limit else text[:limit] + "..."


class InvalidHostError(ValidationException):
    """
    Raised when a host is neither a valid hostname nor an IP address.
    """

    default_error_code = ErrorCodes.INVALID_HOST

    def __init__(
        self,
        message: str = "Invalid host",
        host: Optional[str] = None,
        reason: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field="host", value=host, **kwargs)

        if reason:
            self.details["reason"] = reason

    def user_message(self) -> str:
        """Get user-friendly error message."""
        reasons = {
            "empty": "Please provide a host.",
            "too_long": f"Host is too long (max {Limits.MAX_HOST_LENGTH} characters).",
            "invalid_domain": "That is not a valid domain name or IP address.",
        }
        reason = self.details.get("reason", "")
        return reasons.get(reason, "Please provide a valid host (e.g. play.example.com).")


class InvalidPortError(ValidationException):
    """
    Raised when a port is outside 1..65535.
    """

    default_error_code = ErrorCodes.INVALID_PORT

    def __init__(
        self,
        message: str = "Invalid port",
        port: Optional[Any] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field="port", value=port, **kwargs)

    def user_message(self) -> str:
        return f"Port must be between {Limits.MIN_PORT} and {Limits.MAX_PORT}."


class InvalidTemplateError(ValidationException):
    """
    Raised when a label template is empty or too long.
    """

    default_error_code = ErrorCodes.INVALID_TEMPLATE

    def __init__(
        self,
        message: str = "Invalid label template",
        errors: Optional[List[str]] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if errors:
            self.details["errors"] = errors

    def user_message(self) -> str:
        errors = self.details.get("errors", [])
        if errors:
            return "Invalid label:\n" + "\n".join(f"• {e}" for e in errors[:5])
        return "The provided label template is invalid."


class ServerNotFoundError(ValidationException):
    """
    Raised when removing a host that the guild does not monitor.
    """

    default_error_code = ErrorCodes.SERVER_NOT_FOUND

    def __init__(
        self,
        message: str = "Server not found",
        host: Optional[str] = None,
        guild_id: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field="host", value=host, **kwargs)

        if guild_id:
            self.details["guild_id"] = guild_id

    def user_message(self) -> str:
        return MessageTemplates.SERVER_NOT_FOUND
