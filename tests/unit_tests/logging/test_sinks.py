"""
Sink 单元测试

测试 StdioSink 的 console/json 输出以及 SentrySink 的事件适配。
"""

from __future__ import annotations

import io
import json
from datetime import datetime, timezone

from sentrybridge.logging.formatters import ConsoleFormatter
from sentrybridge.logging.sinks import SentrySink, StdioSink
from sentrybridge.sentry import Level, SentryCore, Severity


def _event(**overrides):
    event = {
        "level": "error",
        "message": "payment failed",
        "logger": "billing",
        "timestamp": "2024-05-17T12:30:45+00:00",
        "order_id": 42,
    }
    event.update(overrides)
    return event


class TestStdioSink:
    """StdioSink 输出格式测试"""

    def test_console_line(self):
        stream = io.StringIO()
        StdioSink(fmt="console", stream=stream).emit(_event(_private="hidden"))

        line = stream.getvalue()
        assert "ERROR" in line
        assert "billing" in line
        assert "payment failed order_id=42" in line
        assert "hidden" not in line
        assert "\x1b[" not in line  # StringIO 不是 tty，不着色

    def test_console_appends_exception_text(self):
        stream = io.StringIO()
        StdioSink(stream=stream).emit(_event(exception="Traceback (most recent call last):\nValueError: x"))

        lines = stream.getvalue().splitlines()
        assert lines[1] == "Traceback (most recent call last):"
        assert "exception=" not in lines[0]

    def test_json_line_skips_private_keys(self):
        stream = io.StringIO()
        StdioSink(fmt="json", stream=stream).emit(_event(_private="hidden", obj=object()))

        payload = json.loads(stream.getvalue())
        assert payload["message"] == "payment failed"
        assert payload["order_id"] == 42
        assert "_private" not in payload
        assert isinstance(payload["obj"], str)

    def test_formatter_truncates_logger(self):
        formatter = ConsoleFormatter(logger_width=8, separator=" ")
        line = formatter.format(_event(logger="sentrybridge.logging.sinks"), use_color=False)

        assert " ...sinks " in line


class TestSentrySink:
    """SentrySink 事件适配测试"""

    def test_event_becomes_entry_and_fields(self, spy):
        sink = SentrySink(SentryCore(spy))
        sink.emit(_event(exception="rendered traceback", _exc_marker=True))

        packet = spy.packets[0]
        assert packet.message == "payment failed"
        assert packet.level is Severity.ERROR
        assert packet.logger == "billing"
        assert packet.timestamp == datetime(2024, 5, 17, 12, 30, 45, tzinfo=timezone.utc)
        assert packet.extra == {"order_id": 42}

    def test_disabled_levels_are_dropped(self, spy):
        sink = SentrySink(SentryCore(spy, level=Level.ERROR))
        sink.emit(_event(level="warning"))

        assert spy.packets == []

    def test_error_argument_is_attached(self, spy):
        sink = SentrySink(SentryCore(spy))
        sink.emit(_event(), ValueError("card declined"))

        assert spy.packets[0].extra["error"] == "ValueError: card declined"

    def test_missing_timestamp_is_filled(self, spy):
        event = _event()
        del event["timestamp"]
        SentrySink(SentryCore(spy)).emit(event)

        assert spy.packets[0].timestamp.tzinfo is not None

    def test_close_flushes_borrowed_core(self, spy):
        SentrySink(SentryCore(spy)).close()

        assert spy.flushes == 1
        assert not spy.closed

    def test_close_closes_owned_core(self, spy):
        SentrySink(SentryCore(spy), owns_core=True).close()

        assert spy.closed
