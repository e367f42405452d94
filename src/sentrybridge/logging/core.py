"""
Core logging configuration and initialization logic.

``configure_logging`` builds a root structlog logger explicitly instead of
registering it globally. Callers pass the returned runtime (or loggers derived
from it) down, or bind it per request with ``sentrybridge.logging.context``.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Iterable, Optional

import structlog
from structlog.typing import EventDict, FilteringBoundLogger, WrappedLogger

from sentrybridge.sentry import ConfigurationError, SentryCore, build_core

from .formatters import ConsoleFormatter
from .interceptors import RedirectStdLibHandler, redirect_stdlib
from .sinks import BaseSink, LogFormat, SentrySink, StdioSink

if TYPE_CHECKING:
    from sentrybridge.config import Settings
    from sentrybridge.config.sentry import SentrySettings

EXC_KEY = "_exc"


# =============================================================================
# Structlog Processors
# =============================================================================


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log event."""
    event_dict["logger"] = event_dict.pop("_name", "root")
    return event_dict


def rename_event_key(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename 'event' to 'message'."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def capture_exception(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Keep the live exception before ``format_exc_info`` turns it into text."""
    exc = _resolve_exception(event_dict.get("exc_info"))
    if exc is not None:
        event_dict[EXC_KEY] = exc
    return event_dict


def _resolve_exception(exc_info: Any) -> Optional[BaseException]:
    if isinstance(exc_info, BaseException):
        return exc_info
    if isinstance(exc_info, tuple):
        return exc_info[1] if len(exc_info) > 1 else None
    if exc_info:
        return sys.exc_info()[1]
    return None


class MultiSinkRenderer:
    """Render log to all configured sinks. Returns empty to suppress default output."""

    def __init__(self, sinks: Iterable[BaseSink]):
        self._sinks = list(sinks)

    @property
    def sinks(self) -> list[BaseSink]:
        return list(self._sinks)

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        error = event_dict.pop(EXC_KEY, None)
        for sink in self._sinks:
            try:
                sink.emit(event_dict, error)
            except Exception as exc:
                # Logging must never break the application.
                sys.__stderr__.write(f"sentrybridge: {type(sink).__name__} failed: {exc!r}\n")
        return ""

    def close(self) -> None:
        for sink in self._sinks:
            sink.close()


class _NopFile:
    def write(self, s: str) -> None:
        pass

    def flush(self) -> None:
        pass


_NOP_FILE = _NopFile()


# =============================================================================
# Configuration Logic
# =============================================================================


@dataclass
class LoggingRuntime:
    """Everything ``configure_logging`` built; owned by the caller."""

    logger: FilteringBoundLogger
    renderer: MultiSinkRenderer
    stdlib_handler: Optional[RedirectStdLibHandler] = None

    def get_logger(self, name: Optional[str] = None, **fields: Any) -> FilteringBoundLogger:
        if name:
            fields["_name"] = name
        return self.logger.bind(**fields) if fields else self.logger

    def close(self) -> None:
        if self.stdlib_handler is not None:
            logging.getLogger().removeHandler(self.stdlib_handler)
            self.stdlib_handler = None
        self.renderer.close()


def parse_level(level: str) -> int:
    """Translate a level name into a stdlib level number."""
    value = logging.getLevelName(str(getattr(level, "value", level)).upper())
    if not isinstance(value, int):
        raise ConfigurationError(f"Unknown log level: {level!r}", details={"level": level})
    return value


def build_sinks(
    sinks: str,
    *,
    fmt: str = "console",
    stream: Any = None,
    formatter: Optional[ConsoleFormatter] = None,
    sentry: Optional["SentrySettings"] = None,
    sentry_core: Optional[SentryCore] = None,
) -> list[BaseSink]:
    """Create the sinks named in ``sinks`` (comma-separated: stdio, sentry)."""
    log_format: LogFormat = "json" if fmt.lower() == "json" else "console"

    result: list[BaseSink] = []
    for name in (s.strip().lower() for s in sinks.split(",")):
        if not name:
            continue
        if name == "stdio":
            result.append(StdioSink(fmt=log_format, stream=stream or sys.stdout, formatter=formatter))
        elif name == "sentry":
            if sentry_core is not None:
                result.append(SentrySink(sentry_core))
            elif sentry is not None:
                result.append(SentrySink(build_core(sentry), owns_core=True))
            else:
                raise ConfigurationError("Sentry sink requested without Sentry settings")
        else:
            raise ConfigurationError(f"Unknown log sink: {name!r}", details={"sink": name})
    return result


def configure_logging(
    *,
    level: str = "INFO",
    sinks: str = "stdio",
    fmt: str = "console",
    sentry: Optional["SentrySettings"] = None,
    sentry_core: Optional[SentryCore] = None,
    redirect_stdlib_logging: bool = True,
    stream: Any = None,
    formatter: Optional[ConsoleFormatter] = None,
) -> LoggingRuntime:
    """
    Build the logging pipeline.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        sinks: Comma-separated sink names (stdio, sentry)
        fmt: Output format for stdio sink (console, json)
        sentry: Sentry settings used to build the sentry sink
        sentry_core: Prebuilt core for the sentry sink (takes precedence over ``sentry``)
        redirect_stdlib_logging: Route stdlib ``logging`` records into this pipeline
        stream: Output stream for the stdio sink (default: stdout)
        formatter: Console formatter for the stdio sink

    Raises:
        ConfigurationError: unknown level or sink name, or an invalid Sentry DSN.
    """
    min_level = parse_level(level)
    renderer = MultiSinkRenderer(
        build_sinks(
            sinks,
            fmt=fmt,
            stream=stream,
            formatter=formatter,
            sentry=sentry,
            sentry_core=sentry_core,
        )
    )

    processors = [
        structlog.stdlib.add_log_level,
        add_timestamp,
        add_logger_name,
        rename_event_key,
        structlog.processors.StackInfoRenderer(),
        capture_exception,
        structlog.processors.format_exc_info,
        renderer,
    ]
    logger: FilteringBoundLogger = structlog.wrap_logger(
        structlog.PrintLogger(file=_NOP_FILE),
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        cache_logger_on_first_use=False,
    )

    handler = redirect_stdlib(logger, min_level) if redirect_stdlib_logging else None
    return LoggingRuntime(logger=logger, renderer=renderer, stdlib_handler=handler)


def configure_from_settings(settings: "Settings") -> LoggingRuntime:
    """Build the logging pipeline from ``sentrybridge.config.settings``."""
    log = settings.logging
    sentry = settings.sentry if "sentry" in log.sinks.lower() else None
    return configure_logging(
        level=log.level.value,
        sinks=log.sinks,
        fmt=log.format.value,
        sentry=sentry,
        redirect_stdlib_logging=log.redirect_stdlib,
        formatter=ConsoleFormatter(
            timestamp_format=log.console_timestamp_format,
            level_width=log.console_level_width,
            logger_width=log.console_logger_width,
            separator=log.console_separator,
        ),
    )
