"""
Log sink abstractions and concrete implementations.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Literal, Optional

import orjson
from structlog.typing import EventDict

from sentrybridge.sentry import LogEntry, SentryCore, level_from_name

from .formatters import ConsoleFormatter

LogFormat = Literal["console", "json"]


def orjson_dumps(v: Any, *, default: Any = None) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default, option=orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC).decode()


# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks."""

    @abstractmethod
    def emit(self, event_dict: EventDict, error: Optional[BaseException] = None) -> None:
        """Emit a log event to the sink.

        ``error`` is the live exception attached to the event, if any.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Flush and release resources."""
        ...


class StdioSink(BaseSink):
    """Standard I/O sink with configurable format.

    Args:
        fmt: Output format - "console" (colored human-readable) or "json"
        stream: Output stream (default: stderr)
        formatter: Console formatter (default column layout when omitted)
    """

    def __init__(
        self,
        fmt: LogFormat = "console",
        stream: Any = None,
        formatter: Optional[ConsoleFormatter] = None,
    ):
        self._fmt = fmt
        self._stream = stream or sys.stderr
        self._formatter = formatter or ConsoleFormatter()

    def emit(self, event_dict: EventDict, error: Optional[BaseException] = None) -> None:
        if self._fmt == "json":
            public = {k: v for k, v in event_dict.items() if not k.startswith("_")}
            output = orjson_dumps(public, default=str)
        else:
            use_color = bool(getattr(self._stream, "isatty", lambda: False)())
            output = self._formatter.format(event_dict, use_color=use_color)

        self._stream.write(output + "\n")
        self._stream.flush()

    def close(self) -> None:
        self._stream.flush()


class SentrySink(BaseSink):
    """Forwards structlog events to a ``SentryCore``.

    Bound context and call-site keys arrive as packet extras; the rendered
    ``exception`` text is dropped because ``errorVerbose`` already carries it.
    An owned core (built by ``configure_logging``) is closed with the sink;
    a caller-supplied one is only flushed.
    """

    RESERVED_KEYS = {"level", "message", "event", "timestamp", "logger", "exception", "exc_info"}

    def __init__(self, core: SentryCore, *, owns_core: bool = False):
        self._core = core
        self._owns_core = owns_core

    @property
    def core(self) -> SentryCore:
        return self._core

    def emit(self, event_dict: EventDict, error: Optional[BaseException] = None) -> None:
        entry = LogEntry(
            level=level_from_name(str(event_dict.get("level", "info"))),
            message=str(event_dict.get("message", event_dict.get("event", ""))),
            timestamp=_parse_timestamp(event_dict.get("timestamp")),
            error=error,
            logger=event_dict.get("logger"),
        )
        if not self._core.check(entry):
            return

        fields = {
            key: value
            for key, value in event_dict.items()
            if key not in self.RESERVED_KEYS and not key.startswith("_")
        }
        self._core.write(entry, fields)

    def close(self) -> None:
        if self._owns_core:
            self._core.close()
        else:
            self._core.sync()


def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now(timezone.utc)
