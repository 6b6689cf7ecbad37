"""
Settings module for the analytics engine using Pydantic v2.

Nested models group related options; the top-level ``Settings`` container reads
environment variables (``__`` as nested delimiter) and an optional env file.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

import pytz
from pydantic import (
    BaseModel,
    Field,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from journal_analytics.core.enums import LogLevel, Environment
from journal_analytics.core.errors.base import ConfigurationError

# ─────────────────────────────────────────────────────────────────────────────
# Nested Models for Different Configuration Areas
# ─────────────────────────────────────────────────────────────────────────────

class AppSettings(BaseModel):
    """Application-level settings."""
    PROJECT_NAME: str = Field(
        default="Journal Analytics",
        description="Name of the project",
        min_length=1,
        max_length=100,
    )
    VERSION: str = Field(
        default="1.0.0",
        description="Engine version",
        pattern=r"^\d+\.\d+\.\d+$",
    )
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""
    LOG_LEVEL: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Log format (json/text)")
    LOG_FILE_PATH: Optional[Path] = Field(
        default=None,
        description="Log file path; file logging is disabled when unset",
    )
    MAX_LOG_SIZE: int = Field(
        default=10485760,  # 10MB
        description="Max log file size in bytes",
        gt=0,
    )
    MAX_LOG_BACKUPS: int = Field(
        default=5,
        description="Number of log file backups to retain",
        gt=0,
    )
    CONSOLE_LOGGING: bool = Field(
        default=True,
        description="Enable console logging"
    )
    USE_COLORS: bool = Field(
        default=True,
        description="Use colors in text log format"
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: Union[str, LogLevel]) -> LogLevel:
        """Convert string log levels to enum values."""
        if isinstance(v, str):
            try:
                return LogLevel(v.upper())
            except ValueError:
                valid_levels = [e.value for e in LogLevel]
                raise ConfigurationError(
                    f"Invalid log level: {v}. Must be one of {valid_levels}",
                    context={"log_level": v},
                )
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in {"json", "text", "compact"}:
            raise ConfigurationError(
                f"Invalid log format: {v}",
                context={"log_format": v},
            )
        return v.lower()


class AnalyticsSettings(BaseModel):
    """Performance analytics configuration."""
    TIMEZONE: str = Field(
        default="UTC",
        description="Timezone used to cut calendar windows and daily buckets",
    )
    REPORT_TOP_SYMBOLS: int = Field(
        default=5,
        description="Number of best/worst symbols listed in reports",
        gt=0,
        le=100,
    )

    @field_validator("TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject timezone names pytz does not know."""
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ConfigurationError(
                f"Unknown timezone: {v}",
                context={"timezone": v},
            )
        return v

    def get_timezone(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.TIMEZONE)


# ─────────────────────────────────────────────────────────────────────────────
# Main Settings Model
# ─────────────────────────────────────────────────────────────────────────────

class Settings(BaseSettings):
    """Main settings container."""
    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_nested_delimiter="__",
        validate_assignment=True,
        extra="ignore",
    )

    @classmethod
    def reload(cls) -> None:
        """Force reload settings by clearing the cache."""
        get_settings.cache_clear()


# ─────────────────────────────────────────────────────────────────────────────
# Settings Instance Management
# ─────────────────────────────────────────────────────────────────────────────

@lru_cache()
def get_settings() -> Settings:
    """Return a cached instance of the settings."""
    env_file = os.environ.get("ENV_FILE", ".env")
    return Settings(_env_file=env_file)
