"""
Request-scoped logger injection.

A process builds one root logger (``configure_logging``) and binds it, or a
request-specific child of it, for the current execution context. Code deeper
in the call stack retrieves it with ``get_logger`` instead of relying on a
global logger registry.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, Iterator, Optional

import structlog

_current_logger: ContextVar[Optional[Any]] = ContextVar("sentrybridge_logger", default=None)


def set_logger(logger: Any) -> Token:
    """Bind ``logger`` to the current context. Returns a token for ``reset_logger``."""
    return _current_logger.set(logger)


def reset_logger(token: Token) -> None:
    _current_logger.reset(token)


@contextmanager
def use_logger(logger: Any) -> Iterator[Any]:
    token = set_logger(logger)
    try:
        yield logger
    finally:
        reset_logger(token)


def get_logger(name: Optional[str] = None, **fields: Any) -> Any:
    """Return the context's logger, optionally named and with extra fields.

    Falls back to ``structlog.get_logger()`` when nothing has been bound.
    """
    logger = _current_logger.get()
    if logger is None:
        logger = structlog.get_logger()
    if name:
        fields["_name"] = name
    return logger.bind(**fields) if fields else logger
