"""
============================================================================
GUILD STATUS BOT - LOGGING UTILITY
============================================================================
Loguru-based logging with a console sink, an optional rotating file sink
and a dedicated error log.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import sys
import time
from functools import wraps
from typing import Optional

from loguru import logger

from config.settings import Settings, get_settings


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}"


# ============================================================================
# LOGGER CONFIGURATION
# ============================================================================

def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure logging system with multiple sinks.
    Sets up console logging and, when enabled, file logging.
    """
    settings = settings or get_settings()
    log_settings = settings.logging

    # Remove default loguru handler
    logger.remove()
    logger.configure(extra={"name": "root"})

    log_level = log_settings.level.value

    # Console sink
    if log_settings.to_console:
        logger.add(
            sys.stdout,
            format=CONSOLE_FORMAT,
            level=log_level,
            colorize=log_settings.colorize,
            backtrace=True,
            diagnose=not settings.is_production,
        )

    # File sinks
    if log_settings.to_file:
        log_settings.logs_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_settings.file_path,
            format=FILE_FORMAT,
            level=log_level,
            rotation=log_settings.rotation,
            retention=log_settings.retention,
            compression="zip",
            serialize=log_settings.serialize,
            backtrace=True,
            diagnose=False,
        )

        # Error log file (separate file for errors)
        logger.add(
            log_settings.logs_dir / "errors.log",
            format=FILE_FORMAT,
            level="ERROR",
            rotation="1 day",
            retention=log_settings.retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logger.bind(name="Logging").info(
        f"Logging initialized - level={log_level}, "
        f"console={log_settings.to_console}, file={log_settings.to_file}"
    )


def get_logger(name: Optional[str] = None):
    """
    Get logger instance with optional name.

    Args:
        name: Logger name (usually the component name)

    Returns:
        Logger instance
    """
    return logger.bind(name=name or "root")


# ============================================================================
# LOG DECORATORS
# ============================================================================

def log_execution_time(func):
    """
    Decorator to log coroutine execution time at DEBUG level.
    """
    @wraps(func)
    async def async_wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            return await func(*args, **kwargs)
        finally:
            elapsed = time.perf_counter() - start_time
            logger.bind(name="Timing").debug(
                f"{func.__qualname__} finished in {elapsed:.4f}s"
            )

    if not asyncio.iscoroutinefunction(func):
        raise TypeError("log_execution_time only decorates coroutine functions")
    return async_wrapper
