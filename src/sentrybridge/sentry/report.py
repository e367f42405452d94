"""
Report builder: turns a log entry and its field context into a Sentry packet.

Stack traces are taken from the entry's exception. The causal chain
(``__cause__`` / ``__context__``) is walked from the outermost exception to
the root cause, so the innermost raising call site ends up as the last frame.
"""

from __future__ import annotations

import os
import sys
import sysconfig
import traceback
from functools import lru_cache
from typing import Any, Iterator, Mapping, Optional

from .packet import LogEntry, ReportPacket, Stacktrace, StacktraceFrame
from .severity import severity_for

ERROR_KEY = "error"
ERROR_VERBOSE_KEY = "errorVerbose"

_LIBRARY_DIRS = ("site-packages", "dist-packages")


def build_packet(entry: LogEntry, fields: Mapping[str, Any]) -> ReportPacket:
    """Build a report packet. Neither ``entry`` nor ``fields`` is mutated."""
    extra = dict(fields)
    interfaces: tuple[Stacktrace, ...] = ()

    if entry.error is not None:
        extra[ERROR_KEY] = describe_error(entry.error)
        extra[ERROR_VERBOSE_KEY] = describe_error_verbose(entry.error)
        stacktrace = extract_stacktrace(entry.error)
        if stacktrace is not None:
            interfaces = (stacktrace,)

    return ReportPacket(
        message=entry.message,
        level=severity_for(entry.level),
        timestamp=entry.timestamp,
        extra=extra,
        interfaces=interfaces,
        logger=entry.logger,
    )


def describe_error(error: BaseException) -> str:
    """Single-line form, e.g. ``RuntimeError: fifth error``."""
    return "".join(traceback.format_exception_only(type(error), error)).strip()


def describe_error_verbose(error: BaseException) -> str:
    """Full traceback text including chained causes."""
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def iter_chain(error: BaseException) -> Iterator[BaseException]:
    """Yield ``error`` followed by its causes, outermost first."""
    seen: set[int] = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


def extract_stacktrace(error: BaseException) -> Optional[Stacktrace]:
    """Collect one frame per recorded call site; ``None`` when nothing was recorded."""
    frames: list[StacktraceFrame] = []
    for exc in iter_chain(error):
        for frame, lineno in traceback.walk_tb(exc.__traceback__):
            frames.append(_make_frame(frame, lineno))
    if not frames:
        return None
    return Stacktrace(frames=tuple(frames))


def _make_frame(frame: Any, lineno: int) -> StacktraceFrame:
    abs_path = os.path.abspath(frame.f_code.co_filename)
    return StacktraceFrame(
        filename=_relative_filename(abs_path),
        function=frame.f_code.co_name,
        module=frame.f_globals.get("__name__", "<unknown>"),
        lineno=lineno,
        abs_path=abs_path,
        in_app=_is_in_app(abs_path),
    )


def _relative_filename(abs_path: str) -> str:
    best = ""
    for entry in sys.path:
        if not entry:
            continue
        root = os.path.abspath(entry)
        if abs_path.startswith(root + os.sep) and len(root) > len(best):
            best = root
    if not best:
        return abs_path
    return os.path.relpath(abs_path, best)


@lru_cache(maxsize=1)
def _stdlib_dirs() -> tuple[str, ...]:
    paths = sysconfig.get_paths()
    return tuple(os.path.abspath(paths[key]) for key in ("stdlib", "platstdlib") if key in paths)


def _is_in_app(abs_path: str) -> bool:
    parts = abs_path.split(os.sep)
    if any(part in _LIBRARY_DIRS for part in parts):
        return False
    return not any(abs_path.startswith(root + os.sep) for root in _stdlib_dirs())
