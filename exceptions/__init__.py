"""
Exceptions Package for Guild Status Bot

Provides a comprehensive exception hierarchy for error handling
throughout the application.
"""

from exceptions.base import (
    GuildStatusException,
    ConfigurationError,
    InitializationError
)

from exceptions.storage import (
    StorageException,
    ConfigLoadDegraded,
    ConfigSaveFailed
)

from exceptions.validation import (
    ValidationException,
    InvalidHostError,
    InvalidPortError,
    InvalidTemplateError,
    ServerNotFoundError
)

from exceptions.monitoring import (
    MonitoringException,
    ProbeException,
    ProbeTimeoutError,
    ProbeNetworkFailure,
    ProbeProtocolError,
    LabelException,
    TargetUnmanageable,
    TargetNotFound,
    LabelWriteFailed
)

__all__ = [
    # Base exceptions
    "GuildStatusException",
    "ConfigurationError",
    "InitializationError",

    # Storage exceptions
    "StorageException",
    "ConfigLoadDegraded",
    "ConfigSaveFailed",

    # Validation exceptions
    "ValidationException",
    "InvalidHostError",
    "InvalidPortError",
    "InvalidTemplateError",
    "ServerNotFoundError",

    # Monitoring exceptions
    "MonitoringException",
    "ProbeException",
    "ProbeTimeoutError",
    "ProbeNetworkFailure",
    "ProbeProtocolError",
    "LabelException",
    "TargetUnmanageable",
    "TargetNotFound",
    "LabelWriteFailed"
]
