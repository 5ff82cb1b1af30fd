"""
Settings Module for Guild Status Bot

Configuration management using Pydantic Settings.
Supports environment variables, .env files, and runtime configuration.
Includes validation, type checking, and sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

from pydantic import (
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from config.constants import Defaults, Limits


class Environment(str, Enum):
    """Application environment enumeration."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BaseSettingsConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True
    )


class BotSettings(BaseSettingsConfig):
    """
    Discord Bot Configuration Settings

    Contains the bot token and the knobs that control how slash
    commands are published and how long a rate-limited request
    may wait before it is abandoned.
    """

    model_config = SettingsConfigDict(
        env_prefix="DISCORD_",
        env_file=".env",
        extra="ignore"
    )

    token: SecretStr = Field(
        default=SecretStr(""),
        description="Discord bot token (required at startup)"
    )
    dev_guild_id: Optional[int] = Field(
        default=None,
        description="Guild that receives an immediate command sync during development"
    )
    sync_commands: bool = Field(
        default=True,
        description="Sync application commands on startup"
    )
    max_ratelimit_timeout: float = Field(
        default=30.0,
        ge=30.0,
        le=600.0,
        description="Longest rate-limit wait before discord.py raises instead of sleeping"
    )

    @property
    def has_token(self) -> bool:
        return bool(self.token.get_secret_value().strip())


class MonitoringSettings(BaseSettingsConfig):
    """
    Monitoring Configuration Settings

    Controls the per-guild check interval, probe timeouts and the way
    channel labels are rendered.
    """

    model_config = SettingsConfigDict(
        env_prefix="MONITOR_",
        env_file=".env",
        extra="ignore"
    )

    check_interval: int = Field(
        default=Defaults.CHECK_INTERVAL,
        ge=10,
        le=3600,
        description="Seconds between two monitoring cycles of one guild"
    )
    probe_timeout: float = Field(
        default=Defaults.PROBE_TIMEOUT,
        gt=0,
        le=60,
        description="Timeout handed to the status query itself"
    )
    probe_deadline: float = Field(
        default=Defaults.PROBE_DEADLINE,
        gt=0,
        le=120,
        description="Hard wall-clock ceiling around a whole probe attempt"
    )
    enable_srv: bool = Field(
        default=True,
        description="Resolve _minecraft._tcp SRV records for Java servers"
    )
    label_max_length: int = Field(
        default=Limits.CHANNEL_NAME_MAX,
        ge=1,
        le=Limits.CHANNEL_NAME_MAX,
        description="Maximum channel name length accepted by Discord"
    )
    default_online_name: str = Field(
        default=Defaults.ONLINE_NAME,
        min_length=1,
        description="Label template used while the server is online"
    )
    default_offline_name: str = Field(
        default=Defaults.OFFLINE_NAME,
        min_length=1,
        description="Label used while the server is unreachable"
    )

    @model_validator(mode="after")
    def validate_timeouts(self) -> "MonitoringSettings":
        """The outer deadline must not undercut the inner query timeout."""
        if self.probe_deadline < self.probe_timeout:
            raise ValueError(
                "probe_deadline must be greater than or equal to probe_timeout"
            )
        return self


class StorageSettings(BaseSettingsConfig):
    """
    Storage Configuration Settings

    Location and formatting of the JSON document that holds every
    guild's monitored servers.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        extra="ignore"
    )

    data_file: Path = Field(
        default=Path("servers.json"),
        description="Path of the persisted guild configuration"
    )
    indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="JSON indentation used when saving"
    )

    @field_validator("data_file")
    @classmethod
    def validate_data_file(cls, v: Path) -> Path:
        """Normalize the data file path."""
        if not v.suffix:
            v = v.with_suffix(".json")
        return v


class LoggingSettings(BaseSettingsConfig):
    """
    Logging Configuration Settings
    """

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore"
    )

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Minimum log level"
    )
    to_console: bool = Field(
        default=True,
        description="Write logs to stdout"
    )
    to_file: bool = Field(
        default=False,
        description="Write logs to a rotating file"
    )
    file_path: Path = Field(
        default=Path("logs/bot.log"),
        description="Log file location"
    )
    rotation: str = Field(
        default="10 MB",
        description="Rotation policy for the log file"
    )
    retention: str = Field(
        default="7 days",
        description="How long rotated files are kept"
    )
    colorize: bool = Field(
        default=True,
        description="Colorize console output"
    )
    serialize: bool = Field(
        default=False,
        description="Write the log file as JSON records"
    )

    @property
    def logs_dir(self) -> Path:
        return self.file_path.parent


class Settings(BaseSettingsConfig):
    """
    Main Settings Class

    Aggregates all settings sections and provides the main
    configuration interface for the application.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment"
    )

    # Application info
    app_name: str = Field(
        default="Guild Status Bot",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    # Lifecycle
    shutdown_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Upper bound for the final save and cycle drain on shutdown"
    )

    # Web server (for health checks)
    health_enabled: bool = Field(
        default=False,
        description="Expose the /health endpoint"
    )
    web_host: str = Field(
        default="0.0.0.0",
        description="Web server host"
    )
    web_port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Web server port"
    )

    # Nested settings
    bot: BotSettings = Field(
        default_factory=BotSettings
    )
    monitoring: MonitoringSettings = Field(
        default_factory=MonitoringSettings
    )
    storage: StorageSettings = Field(
        default_factory=StorageSettings
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT

    @model_validator(mode="after")
    def configure_for_environment(self) -> "Settings":
        """Apply environment-specific configuration."""
        if self.is_production:
            self.logging.colorize = False
        elif self.is_development:
            if self.logging.level == LogLevel.INFO:
                self.logging.level = LogLevel.DEBUG
        return self

    def to_dict(self, *, exclude_secrets: bool = True) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        data = self.model_dump(mode="json")

        if exclude_secrets:
            def remove_secrets(obj: Any) -> Any:
                if isinstance(obj, dict):
                    return {
                        k: remove_secrets(v)
                        for k, v in obj.items()
                        if "secret" not in k.lower()
                        and "token" not in k.lower()
                    }
                elif isinstance(obj, list):
                    return [remove_secrets(item) for item in obj]
                return obj

            data = remove_secrets(data)

        return data


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This function is cached to ensure a single settings instance
    is used throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
