"""
Sentrybridge Configuration Module.

Implements the Nested Settings Pattern for orthogonal configuration domains.
Each sub-module represents an independent concern with its own environment variable prefix.

Usage:
    from sentrybridge.config import settings

    settings.environment.env  # "development"
    settings.logging.level
    settings.sentry.dsn
"""

from functools import cached_property
import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from .environment import EnvironmentSettings
from .logging import LogFormat, LoggingSettings, LogLevel
from .sentry import SentrySettings


def _get_env_files() -> tuple[str, ...]:
    """Determine which .env files to load based on SB_ENV."""
    env = os.getenv("SB_ENV", "development")
    return (
        ".env",
        ".env.local",
        f".env.{env}",
        f".env.{env}.local",
    )


class Settings(BaseSettings):
    """Composite settings aggregating all configuration domains."""

    model_config = SettingsConfigDict(
        env_file=_get_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @cached_property
    def environment(self) -> EnvironmentSettings:
        return EnvironmentSettings()

    @cached_property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()

    @cached_property
    def sentry(self) -> SentrySettings:
        settings = SentrySettings()
        if settings.environment is None:
            # Default the Sentry environment to SB_ENV.
            settings = settings.model_copy(update={"environment": self.environment.env})
        return settings


settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "EnvironmentSettings",
    "LogFormat",
    "LogLevel",
    "LoggingSettings",
    "SentrySettings",
]
