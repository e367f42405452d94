"""
Report packet types handed to the Sentry transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import orjson

from .severity import Severity

PLATFORM = "python"


@dataclass(frozen=True)
class LogEntry:
    """A single structured log entry produced by the logging front-end."""

    level: int
    message: str
    timestamp: datetime
    error: Optional[BaseException] = None
    logger: Optional[str] = None


@dataclass(frozen=True)
class StacktraceFrame:
    filename: str
    function: str
    module: str
    lineno: int
    abs_path: str
    in_app: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "function": self.function,
            "module": self.module,
            "lineno": self.lineno,
            "abs_path": self.abs_path,
            "in_app": self.in_app,
        }


@dataclass(frozen=True)
class Stacktrace:
    """Stack trace interface. Frames are ordered oldest call first."""

    frames: Tuple[StacktraceFrame, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"frames": [frame.to_dict() for frame in self.frames]}


@dataclass(frozen=True)
class ReportPacket:
    message: str
    level: Severity
    timestamp: datetime
    platform: str = PLATFORM
    extra: Dict[str, Any] = field(default_factory=dict)
    interfaces: Tuple[Stacktrace, ...] = ()
    logger: Optional[str] = None

    @property
    def stacktrace(self) -> Optional[Stacktrace]:
        for interface in self.interfaces:
            if isinstance(interface, Stacktrace):
                return interface
        return None

    def to_event(self) -> Dict[str, Any]:
        """Render the packet as a JSON-safe Sentry event payload."""
        event: Dict[str, Any] = {
            "message": self.message,
            "level": self.level.value,
            "timestamp": _format_timestamp(self.timestamp),
            "platform": self.platform,
            "extra": _json_safe(self.extra),
        }
        if self.logger:
            event["logger"] = self.logger
        stacktrace = self.stacktrace
        if stacktrace is not None:
            event["stacktrace"] = stacktrace.to_dict()
        return event


def _format_timestamp(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _json_safe(value: Dict[str, Any]) -> Dict[str, Any]:
    """Coerce arbitrary field values into JSON types (unknown objects become ``str``)."""
    return orjson.loads(
        orjson.dumps(value, default=str, option=orjson.OPT_NON_STR_KEYS | orjson.OPT_NAIVE_UTC)
    )
