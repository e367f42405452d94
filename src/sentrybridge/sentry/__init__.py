"""
Sentry sink: severity mapping, field context, report building and delivery.
"""

from .core import SentryCore, build_core
from .exceptions import ConfigurationError, DeliveryError, InternalError, SentryBridgeError
from .fields import FieldContext
from .packet import LogEntry, ReportPacket, Stacktrace, StacktraceFrame
from .report import build_packet, extract_stacktrace
from .severity import Level, Severity, level_from_name, severity_for
from .transport import HttpTransport, Transport

__all__ = [
    "ConfigurationError",
    "DeliveryError",
    "FieldContext",
    "HttpTransport",
    "InternalError",
    "Level",
    "LogEntry",
    "ReportPacket",
    "SentryBridgeError",
    "SentryCore",
    "Severity",
    "Stacktrace",
    "StacktraceFrame",
    "Transport",
    "build_core",
    "build_packet",
    "extract_stacktrace",
    "level_from_name",
    "severity_for",
]
