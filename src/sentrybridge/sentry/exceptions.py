"""
Sentry bridge exception hierarchy.

Only configuration problems are raised to callers. Delivery problems stay
inside the transport futures and are absorbed by the core.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SentryBridgeError(Exception):
    """Root of all sentrybridge errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class ConfigurationError(SentryBridgeError):
    """Invalid or missing configuration (bad DSN, unknown level name, ...)."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)


class DeliveryError(SentryBridgeError):
    """The backend rejected or failed to receive an event."""

    def __init__(self, *, event_id: str, status_code: Optional[int] = None, reason: str = "") -> None:
        message = f"Failed to deliver event {event_id}"
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            code="DELIVERY_ERROR",
            details={"event_id": event_id, "status_code": status_code},
        )


class InternalError(SentryBridgeError):
    """An unhandled exception converted at a recovery boundary."""

    def __init__(self, message: str = "Internal server error.", *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="INTERNAL", details=details)
