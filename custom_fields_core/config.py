"""
Runtime configuration for the custom fields engine.

Values are read from environment variables the first time get_config() is
called. Host applications and tests may install their own AppConfig.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import EnvironmentVariable, LogLevel


def env_value(name: EnvironmentVariable, default: str) -> str:
    return os.getenv(name.value, default)


def env_flag(name: EnvironmentVariable) -> bool:
    return env_value(name, "false").lower() == "true"


class LoggingConfig(BaseModel):
    """Console logging settings."""

    level: str = Field(
        default_factory=lambda: env_value(EnvironmentVariable.LOG_LEVEL, LogLevel.INFO.value),
        validate_default=True,
    )
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    @field_validator("level")
    def normalize_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LogLevel.__members__:
            raise ValueError(
                f"Unknown log level {v!r}, expected one of {', '.join(LogLevel.__members__)}"
            )
        return level


class FeatureFlags(BaseModel):
    """Switches for optional log output."""

    # ENTER/EXIT debug lines around every @operation
    enable_operation_logging: bool = True
    # One info line per rejected entity payload, listing the failing paths
    log_validation_failures: bool = True


class AppConfig(BaseModel):
    environment: str = Field(
        default_factory=lambda: env_value(EnvironmentVariable.APP_ENV, "development")
    )
    debug: bool = Field(default_factory=lambda: env_flag(EnvironmentVariable.DEBUG))
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    features: FeatureFlags = Field(default_factory=FeatureFlags)

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls()


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    global _config
    _config = config


def reset_config() -> None:
    """Drop the installed config; the next get_config() re-reads the environment."""
    global _config
    _config = None
