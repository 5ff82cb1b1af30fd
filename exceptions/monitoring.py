"""
Monitoring Exception Classes for Guild Status Bot

Exceptions for probing game servers and for updating the channel
labels that reflect their status. None of these abort a monitoring
cycle; they are caught at the unit boundary and reported.
"""

from __future__ import annotations

from typing import Any, Optional

from config.constants import ErrorCodes
from exceptions.base import GuildStatusException


class MonitoringException(GuildStatusException):
    """
    Base Monitoring Exception
    """

    default_error_code = ErrorCodes.MONITORING_ERROR

    def __init__(
        self,
        message: str,
        host: Optional[str] = None,
        guild_id: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if host:
            self.details["host"] = host

        if guild_id:
            self.details["guild_id"] = guild_id


# ============================================================================
# PROBE ERRORS
# ============================================================================

class ProbeException(MonitoringException):
    """
    A status query did not produce an online reading.
    """

    def __init__(
        self,
        message: str,
        port: Optional[int] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if port is not None:
            self.details["port"] = port


class ProbeTimeoutError(ProbeException):
    """
    The probe did not resolve before its overall deadline.
    """

    default_error_code = ErrorCodes.PROBE_TIMEOUT
    log_level = "WARNING"

    def __init__(
        self,
        message: str = "Probe timed out",
        timeout: Optional[float] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if timeout is not None:
            self.details["timeout"] = timeout


class ProbeNetworkFailure(ProbeException):
    """
    DNS resolution or the socket connection failed.
    """

    default_error_code = ErrorCodes.PROBE_NETWORK
    log_level = "WARNING"


class ProbeProtocolError(ProbeException):
    """
    The server answered with something that is not a status reply.
    """

    default_error_code = ErrorCodes.PROBE_PROTOCOL
    log_level = "WARNING"


# ============================================================================
# LABEL ERRORS
# ============================================================================

class LabelException(MonitoringException):
    """
    Base class for failures on the rendering surface.
    """

    def __init__(
        self,
        message: str,
        target_id: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if target_id:
            self.details["target_id"] = target_id


class TargetUnmanageable(LabelException):
    """
    The bot lacks the permission to rename the target channel.

    This is not the server's fault; the entry is skipped.
    """

    default_error_code = ErrorCodes.TARGET_UNMANAGEABLE
    log_level = "WARNING"

    def __init__(self, message: str = "Target channel is not manageable", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class TargetNotFound(LabelException):
    """
    The target channel no longer exists or is not visible.
    """

    default_error_code = ErrorCodes.TARGET_NOT_FOUND
    log_level = "WARNING"

    def __init__(self, message: str = "Target channel not found", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class LabelWriteFailed(LabelException):
    """
    Renaming the target failed (rate limit or transient platform error).

    Never retried within the same cycle.
    """

    default_error_code = ErrorCodes.LABEL_WRITE_FAILED

    def __init__(
        self,
        message: str = "Failed to update channel label",
        retry_after: Optional[float] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        self.retry_after = retry_after
        if retry_after is not None:
            self.details["retry_after"] = retry_after
