"""
Recovery boundary for request handlers and workers.

Unhandled exceptions are reported at critical level (synchronously flushed to
Sentry) and converted into ``InternalError`` so they do not escape the
boundary as arbitrary crashes.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sentrybridge.sentry import InternalError, SentryBridgeError

from .context import get_logger


@contextmanager
def recover(name: Optional[str] = None, *, logger: Any = None) -> Iterator[None]:
    """Usable as ``with recover("worker"):`` or as a ``@recover("worker")`` decorator."""
    log = logger if logger is not None else get_logger(name)
    start = time.perf_counter()
    try:
        yield
    except SentryBridgeError as exc:
        log.warning(
            "Done with handled error.",
            duration=time.perf_counter() - start,
            error=str(exc),
            code=exc.code,
        )
        raise
    except Exception as exc:
        log.critical("Unhandled exception.", duration=time.perf_counter() - start, exc_info=exc)
        raise InternalError(details={"type": type(exc).__name__}) from exc
    else:
        log.info("Done.", duration=time.perf_counter() - start)
