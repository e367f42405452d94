"""
Sentry sink core.

Implements the two-phase ``check`` / ``write`` protocol driven by the logging
front-end. Fatal-tier writes block until their own report has been delivered,
since the caller is usually about to terminate the process.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional

from sentry_sdk.utils import BadDsn

from .exceptions import ConfigurationError
from .fields import FieldContext
from .packet import LogEntry
from .report import build_packet
from .severity import Level, is_fatal, level_from_name, severity_for
from .transport import HttpTransport, Transport

if TYPE_CHECKING:
    import httpx

    from sentrybridge.config.sentry import SentrySettings

_log = logging.getLogger("sentrybridge.sentry.core")


class SentryCore:
    """Sink that turns enabled log entries into Sentry reports.

    Args:
        transport: Shared delivery mechanism (one per root core).
        level: Minimum enabled level.
        fields: Initial field context.
    """

    def __init__(
        self,
        transport: Transport,
        level: int = Level.ERROR,
        fields: Optional[FieldContext] = None,
    ) -> None:
        self._transport = transport
        self._level = level
        self._context = fields if fields is not None else FieldContext()

    @property
    def level(self) -> int:
        return self._level

    @property
    def fields(self) -> Mapping[str, Any]:
        return self._context.fields

    @property
    def transport(self) -> Transport:
        return self._transport

    def enabled(self, level: int) -> bool:
        return level >= self._level

    def check(self, entry: LogEntry) -> bool:
        return self.enabled(entry.level)

    def with_fields(self, fields: Mapping[str, Any]) -> "SentryCore":
        """Child core sharing the transport, with ``fields`` layered on top."""
        return SentryCore(self._transport, self._level, self._context.derive(fields))

    def write(self, entry: LogEntry, fields: Optional[Mapping[str, Any]] = None) -> None:
        """Report ``entry``. Delivery problems are logged and never raised."""
        severity = severity_for(entry.level)
        try:
            packet = build_packet(entry, self._context.derive(fields).fields)
            _, done = self._transport.capture(packet, None)
        except Exception:
            _log.warning("Failed to capture Sentry report for %r", entry.message, exc_info=True)
            return

        if is_fatal(severity):
            self._transport.wait(done)

    def sync(self) -> None:
        """Block until every pending report has been delivered."""
        self._transport.flush()

    def close(self) -> None:
        self._transport.close()


def build_core(settings: "SentrySettings", *, http_client: Optional["httpx.Client"] = None) -> SentryCore:
    """Build a root core wired to a fresh ``HttpTransport``.

    Raises:
        ConfigurationError: the DSN is missing or malformed.
    """
    if not settings.dsn:
        raise ConfigurationError("Sentry DSN is not configured")

    try:
        transport = HttpTransport(
            settings.dsn,
            tags=settings.tags,
            release=settings.release,
            environment=settings.environment,
            server_name=settings.server_name,
            timeout=settings.timeout,
            max_workers=settings.max_workers,
            client=http_client,
        )
    except BadDsn as exc:
        raise ConfigurationError(f"Invalid Sentry DSN: {exc}", details={"dsn": settings.dsn}) from exc

    return SentryCore(transport, level=level_from_name(settings.level.value))
