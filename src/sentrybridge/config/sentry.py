"""
Sentry Configuration.

Connection settings for the Sentry sink.
"""

import socket
from typing import Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import LogLevel


class SentrySettings(BaseSettings):
    """
    Sentry sink settings.
    Prefix: SB_SENTRY_
    """

    model_config = SettingsConfigDict(
        env_prefix="SB_SENTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN (https://<key>@<host>/<project>)",
    )
    level: LogLevel = Field(default=LogLevel.ERROR, description="Minimum level reported to Sentry")
    release: Optional[str] = Field(default=None, description="Release / version identifier")
    environment: Optional[str] = Field(default=None, description="Deployment environment reported to Sentry")
    server_name: str = Field(default_factory=socket.gethostname, description="Host name reported with events")
    tags: Dict[str, str] = Field(default_factory=dict, description="Static tags (JSON object in env)")
    timeout: float = Field(default=5.0, description="HTTP timeout per delivery (seconds)")
    max_workers: int = Field(default=2, ge=1, description="Delivery threads")
