"""
Unified Logging Service for Sentrybridge.

Provides structured logging with multiple sink support:
- stdio: Standard output (console/json format)
- sentry: Error reports delivered to Sentry

Design Pattern: Strategy Pattern for sink abstraction.
Library: structlog + orjson for high-performance JSON serialization.
"""

from .context import get_logger, reset_logger, set_logger, use_logger
from .core import LoggingRuntime, configure_from_settings, configure_logging
from .recovery import recover
from .sinks import BaseSink, SentrySink, StdioSink

__all__ = [
    "BaseSink",
    "LoggingRuntime",
    "SentrySink",
    "StdioSink",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "recover",
    "reset_logger",
    "set_logger",
    "use_logger",
]
