"""
Storage Exception Classes for Guild Status Bot

Exceptions raised while reading or writing the persisted guild
configuration document.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from config.constants import ErrorCodes, MessageTemplates
from exceptions.base import GuildStatusException


class StorageException(GuildStatusException):
    """
    Base Storage Exception

    Parent class for all persistence-related exceptions.
    """

    default_error_code = ErrorCodes.STORAGE_ERROR

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if path is not None:
            self.details["path"] = str(path)


class ConfigLoadDegraded(StorageException):
    """
    Config Load Degraded

    The durable document exists but could not be read or parsed.
    The store falls back to an empty mapping; this is reported,
    never raised to the caller of ``load()``.
    """

    default_error_code = ErrorCodes.CONFIG_LOAD_DEGRADED

    def __init__(
        self,
        message: str = "Stored configuration is unreadable, starting empty",
        preserved_as: Optional[Union[str, Path]] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if preserved_as is not None:
            self.details["preserved_as"] = str(preserved_as)


class ConfigSaveFailed(StorageException):
    """
    Config Save Failed

    Both the atomic replace and the direct fallback write failed.
    The durable state remains whatever was last written successfully.
    """

    default_error_code = ErrorCodes.CONFIG_SAVE_FAILED

    def __init__(
        self,
        message: str = "Failed to save configuration",
        fallback_error: Optional[BaseException] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if fallback_error is not None:
            self.details["fallback_error"] = repr(fallback_error)

    def user_message(self) -> str:
        return MessageTemplates.SAVE_FAILED
