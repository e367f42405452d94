import logging
import threading
import typing as t
from datetime import datetime, timezone

import pytest

from sentrybridge.sentry import ReportPacket


class SpyTransport:
    """Records captured packets and wait calls instead of delivering them."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.packets: list[ReportPacket] = []
        self.waits = 0
        self.waited_on: list[t.Any] = []
        self.flushes = 0
        self.closed = False

    def capture(self, packet: ReportPacket, tags: t.Optional[t.Mapping[str, str]] = None):
        if tags:
            raise AssertionError("Sentry integration shouldn't depend on capture-site tags.")
        with self._lock:
            self.packets.append(packet)
        return "", None

    def wait(self, done: t.Any) -> None:
        with self._lock:
            self.waits += 1
            self.waited_on.append(done)

    def flush(self) -> None:
        with self._lock:
            self.flushes += 1

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def spy() -> SpyTransport:
    return SpyTransport()


@pytest.fixture
def sentinel_time() -> datetime:
    return datetime(2024, 5, 17, 12, 30, 45, tzinfo=timezone.utc)


@pytest.fixture
def restore_stdlib_logging():
    """Restores root stdlib handlers/level replaced by redirect_stdlib."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
