"""
Interceptors for capturing standard library logs.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, TextIO

from sentrybridge.sentry.transport import THREAD_NAME_PREFIX

# structlog's own records would loop straight back into structlog.
_SKIPPED_PREFIXES = ("structlog",)

# Capture and delivery failures of the Sentry sink cannot be reported through
# the Sentry sink; they go to stderr instead.
_STDERR_PREFIXES = ("sentrybridge.sentry",)


class RedirectStdLibHandler(logging.Handler):
    """
    Redirect standard library logging events to an injected structlog logger.
    Exceptions attached to records (``logger.exception(...)``) are forwarded
    as ``exc_info`` so they reach the Sentry sink with their traceback.

    Records logged on Sentry transport worker threads are dropped: forwarding
    them (e.g. httpx's ``HTTP Request: POST ...`` line) would create a new
    report per delivery.
    """

    def __init__(self, logger: Any, level: int = logging.NOTSET, stream: Optional[TextIO] = None):
        super().__init__(level)
        self._logger = logger
        self._stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if record.name.startswith(_STDERR_PREFIXES):
                self._write_stderr(record)
                return
            if record.name.startswith(_SKIPPED_PREFIXES):
                return
            if (record.threadName or "").startswith(THREAD_NAME_PREFIX):
                return

            kwargs: dict[str, Any] = {"_name": self._simplify_logger_name(record.name)}
            if record.exc_info and record.exc_info[1] is not None:
                kwargs["exc_info"] = record.exc_info

            level = getattr(logging, record.levelname, logging.INFO)
            if not isinstance(level, int):
                level = logging.INFO
            self._logger.log(level, record.getMessage(), **kwargs)
        except Exception:
            self.handleError(record)

    def _write_stderr(self, record: logging.LogRecord) -> None:
        stream = self._stream or sys.__stderr__
        stream.write(f"sentrybridge: {record.levelname} {self.format(record)}\n")
        stream.flush()

    @staticmethod
    def _simplify_logger_name(name: str) -> str:
        """
        Simplify a logger name for display.

        - "" / "root" -> "stdlog"
        - "uvicorn.access" -> "uvicorn.access"
        - Other -> keep last 2 parts
        """
        if not name or name == "root":
            return "stdlog"
        parts = name.split(".")
        if len(parts) <= 2:
            return name
        return ".".join(parts[-2:])


def redirect_stdlib(logger: Any, level: int = logging.INFO) -> RedirectStdLibHandler:
    """Replace the stdlib root handlers with a ``RedirectStdLibHandler``."""
    handler = RedirectStdLibHandler(logger)
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    return handler
