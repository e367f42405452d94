"""
恢复边界单元测试

未处理异常以 critical 级别同步上报，并转换为 InternalError。
"""

from __future__ import annotations

import io
import json

import pytest

from sentrybridge.logging import configure_logging, recover, use_logger
from sentrybridge.sentry import ConfigurationError, InternalError, SentryCore, Severity


def _crash():
    raise ZeroDivisionError("division by zero")


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def runtime(spy, stream):
    return configure_logging(
        sinks="stdio,sentry",
        fmt="json",
        stream=stream,
        sentry_core=SentryCore(spy),
        redirect_stdlib_logging=False,
    )


class TestRecover:
    """recover() 边界测试"""

    def test_success_logs_done(self, runtime, spy, stream):
        with recover(logger=runtime.logger):
            pass

        line = json.loads(stream.getvalue())
        assert line["message"] == "Done."
        assert line["duration"] >= 0
        assert spy.packets == []

    def test_unhandled_exception_is_converted(self, runtime, spy):
        with pytest.raises(InternalError) as exc_info:
            with recover(logger=runtime.logger):
                _crash()

        assert isinstance(exc_info.value.__cause__, ZeroDivisionError)
        assert exc_info.value.code == "INTERNAL"

        packet = spy.packets[0]
        assert packet.message == "Unhandled exception."
        assert packet.level is Severity.FATAL
        assert packet.stacktrace.frames[-1].function == "_crash"
        assert spy.waits == 1

    def test_handled_error_propagates(self, runtime, spy, stream):
        with pytest.raises(ConfigurationError):
            with recover(logger=runtime.logger):
                raise ConfigurationError("bad level")

        line = json.loads(stream.getvalue())
        assert line["message"] == "Done with handled error."
        assert line["code"] == "CONFIGURATION_ERROR"
        assert spy.packets == []

    def test_decorator_uses_context_logger(self, runtime, spy):
        @recover("jobs")
        def job():
            _crash()

        with use_logger(runtime.logger):
            with pytest.raises(InternalError):
                job()

        assert spy.packets[0].logger == "jobs"
