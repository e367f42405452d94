"""
Console rendering for the stdio sink.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from structlog.typing import EventDict

_RESET = "\x1b[0m"
_DIM = "\x1b[2m"
_KEY = "\x1b[34m"
_TIMESTAMP = "\x1b[90m"
_LOGGER = "\x1b[35m"

LEVEL_COLORS = {
    "DEBUG": "\x1b[36m",
    "INFO": "\x1b[32m",
    "WARNING": "\x1b[33m",
    "ERROR": "\x1b[31m",
    "CRITICAL": "\x1b[1;31m",
    "FATAL": "\x1b[1;31m",
}


class ConsoleFormatter:
    """Fixed-width, human-readable rendering: ``timestamp | LEVEL | logger | message k=v``."""

    EXCLUDED_KEYS = {"level", "message", "event", "logger", "timestamp", "exception"}

    def __init__(
        self,
        *,
        timestamp_format: str = "%Y-%m-%d %H:%M:%S",
        level_width: int = 8,
        logger_width: int = 32,
        separator: str = " | ",
    ) -> None:
        self.timestamp_format = timestamp_format
        self.level_width = level_width
        self.logger_width = logger_width
        self.separator = separator

    @staticmethod
    def _fit_right(text: str, width: int) -> str:
        if width <= 0:
            return text
        if len(text) > width:
            text = text[-width:] if width <= 3 else "..." + text[-(width - 3) :]
        return f"{text:>{width}}"

    @staticmethod
    def _paint(text: str, color: str | None, use_color: bool) -> str:
        if not use_color or not color:
            return text
        return f"{color}{text}{_RESET}"

    def _timestamp(self, raw: Any) -> str:
        if isinstance(raw, datetime):
            dt = raw
        else:
            try:
                dt = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
            except ValueError:
                return datetime.now().strftime(self.timestamp_format)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone().strftime(self.timestamp_format)

    def format(self, event_dict: EventDict, *, use_color: bool = True) -> str:
        level = str(event_dict.get("level", "info")).upper()
        message = str(event_dict.get("message", event_dict.get("event", "")))

        extras = [
            f"{self._paint(key, _KEY, use_color)}={self._paint(str(value), _DIM, use_color)}"
            for key, value in event_dict.items()
            if key not in self.EXCLUDED_KEYS and not key.startswith("_")
        ]
        if extras:
            message = f"{message} " + " ".join(extras)

        line = self.separator.join(
            [
                self._paint(self._timestamp(event_dict.get("timestamp")), _TIMESTAMP, use_color),
                self._paint(self._fit_right(level, self.level_width), LEVEL_COLORS.get(level), use_color),
                self._paint(
                    self._fit_right(str(event_dict.get("logger", "root")), self.logger_width),
                    _LOGGER,
                    use_color,
                ),
                message,
            ]
        )

        exception = event_dict.get("exception")
        if exception:
            line = f"{line}\n{exception}"
        return line
