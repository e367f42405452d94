"""
Log level model and translation into Sentry severities.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class Level(IntEnum):
    """Front-end log levels, numerically aligned with stdlib ``logging``."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    DPANIC = 45  # development-time panic
    PANIC = 50
    FATAL = 60


class Severity(str, Enum):
    """Sentry event levels (wire values)."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


_SEVERITIES: dict[int, Severity] = {
    Level.DEBUG: Severity.INFO,
    Level.INFO: Severity.INFO,
    Level.WARNING: Severity.WARNING,
    Level.ERROR: Severity.ERROR,
    Level.DPANIC: Severity.FATAL,
    Level.PANIC: Severity.FATAL,
    Level.FATAL: Severity.FATAL,
}

_LEVEL_NAMES: dict[str, Level] = {
    "debug": Level.DEBUG,
    "info": Level.INFO,
    "warn": Level.WARNING,
    "warning": Level.WARNING,
    "err": Level.ERROR,
    "error": Level.ERROR,
    "exception": Level.ERROR,
    "dpanic": Level.DPANIC,
    "critical": Level.PANIC,
    "panic": Level.PANIC,
    "fatal": Level.FATAL,
}


def severity_for(level: int) -> Severity:
    """Map a log level to a Sentry severity.

    Unknown levels are treated as fatal.
    """
    return _SEVERITIES.get(level, Severity.FATAL)


def level_from_name(name: str) -> Level:
    """Resolve a structlog level / method name. Unknown names resolve to FATAL."""
    return _LEVEL_NAMES.get(name.strip().lower(), Level.FATAL)


def is_fatal(severity: Severity) -> bool:
    """Fatal-tier reports are flushed synchronously before ``write`` returns."""
    return severity is Severity.FATAL
