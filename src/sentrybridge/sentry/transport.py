"""
Sentry transport: asynchronous delivery of report packets.

``HttpTransport`` hands every event to a small thread pool which POSTs an
envelope to the project's ``/envelope/`` endpoint. Each capture returns a
future that completes once the backend has answered (or delivery failed).
"""

from __future__ import annotations

import logging
import threading
import uuid
from concurrent import futures
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

import httpx
from sentry_sdk.envelope import Envelope
from sentry_sdk.utils import Dsn

from sentrybridge import __version__

from .exceptions import DeliveryError
from .packet import ReportPacket

_log = logging.getLogger("sentrybridge.sentry.transport")

CLIENT_NAME = f"sentrybridge/{__version__}"

# Worker threads are named "{THREAD_NAME_PREFIX}_N"; records logged on them
# (httpx request lines) must not re-enter the Sentry sink.
THREAD_NAME_PREFIX = "sentry-transport"


class Transport(Protocol):
    """Delivery contract. Implementations must be safe for concurrent use."""

    def capture(
        self, packet: ReportPacket, tags: Optional[Mapping[str, str]] = None
    ) -> Tuple[str, Optional[Future]]:
        """Queue a packet; returns the event id and its completion signal."""
        ...

    def wait(self, done: Optional[Future]) -> None:
        """Block until ``done`` completes. A ``None`` signal returns at once."""
        ...

    def flush(self) -> None:
        """Block until every pending capture completes."""
        ...

    def close(self) -> None: ...


class HttpTransport:
    """Sentry envelope transport over ``httpx``.

    Args:
        dsn: Sentry DSN. Invalid values raise ``sentry_sdk.utils.BadDsn``.
        tags: Static tags stamped on every event.
        release: Release identifier.
        environment: Deployment environment name.
        server_name: Host name reported with every event.
        timeout: HTTP timeout in seconds per delivery.
        max_workers: Delivery threads.
        client: Optional preconfigured ``httpx.Client`` (not closed by ``close``).
    """

    def __init__(
        self,
        dsn: str,
        *,
        tags: Optional[Mapping[str, str]] = None,
        release: Optional[str] = None,
        environment: Optional[str] = None,
        server_name: Optional[str] = None,
        timeout: float = 5.0,
        max_workers: int = 2,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._dsn = Dsn(dsn)
        self._url = f"{self._dsn.scheme}://{self._dsn.netloc}{self._dsn.path}api/{self._dsn.project_id}/envelope/"
        self._auth_header = self._dsn.to_auth(CLIENT_NAME).to_header()
        self._tags = dict(tags or {})
        self._release = release
        self._environment = environment
        self._server_name = server_name

        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=THREAD_NAME_PREFIX)

        self._lock = threading.Lock()
        self._pending: set[Future] = set()
        self._closed = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def closed(self) -> bool:
        return self._closed

    def capture(
        self, packet: ReportPacket, tags: Optional[Mapping[str, str]] = None
    ) -> Tuple[str, Future]:
        event_id = uuid.uuid4().hex
        event = self._prepare_event(event_id, packet, tags)

        future = self._executor.submit(self._send, event_id, event)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return event_id, future

    def wait(self, done: Optional[Future]) -> None:
        # Only this signal: other callers' pending captures are not awaited.
        if done is not None:
            futures.wait([done])

    def flush(self) -> None:
        with self._lock:
            pending = list(self._pending)
        if pending:
            futures.wait(pending)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.flush()
        self._executor.shutdown(wait=True)
        if self._owns_client:
            self._client.close()

    def _prepare_event(
        self, event_id: str, packet: ReportPacket, tags: Optional[Mapping[str, str]]
    ) -> Dict[str, Any]:
        event = packet.to_event()
        event["event_id"] = event_id

        merged_tags = {**self._tags, **(tags or {})}
        if merged_tags:
            event["tags"] = merged_tags
        if self._release:
            event["release"] = self._release
        if self._environment:
            event["environment"] = self._environment
        if self._server_name:
            event["server_name"] = self._server_name
        return event

    def _send(self, event_id: str, event: Dict[str, Any]) -> str:
        envelope = Envelope(
            headers={
                "event_id": event_id,
                "sent_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        envelope.add_event(event)

        try:
            response = self._client.post(
                self._url,
                content=envelope.serialize(),
                headers={
                    "Content-Type": "application/x-sentry-envelope",
                    "X-Sentry-Auth": self._auth_header,
                },
            )
        except httpx.HTTPError as exc:
            raise DeliveryError(event_id=event_id, reason=str(exc)) from exc

        if not response.is_success:
            raise DeliveryError(event_id=event_id, status_code=response.status_code, reason=response.text[:200])
        return event_id

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            _log.warning("Sentry delivery failed: %s", exc)
