"""
SentryCore 单元测试

测试 check/write 两阶段协议、fatal 级别同步 flush 以及配置构建。
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future

import httpx
import pytest

from sentrybridge.config import SentrySettings
from sentrybridge.sentry import (
    ConfigurationError,
    HttpTransport,
    Level,
    LogEntry,
    SentryCore,
    Severity,
    build_core,
)


class TestCheck:
    """check() 启用判定测试"""

    def test_disabled_below_minimum(self, spy, sentinel_time):
        core = SentryCore(spy, level=Level.ERROR)

        assert core.check(LogEntry(level=0, message="", timestamp=sentinel_time)) is False
        assert spy.packets == []

    def test_enabled_at_minimum(self, spy, sentinel_time):
        core = SentryCore(spy, level=Level.ERROR)
        entry = LogEntry(level=Level.ERROR, message="", timestamp=sentinel_time)

        assert core.check(entry) is True
        assert core.check(entry) is True
        assert spy.packets == []

    def test_enabled_predicate(self, spy):
        core = SentryCore(spy, level=Level.WARNING)

        assert not core.enabled(Level.INFO)
        assert core.enabled(Level.WARNING)
        assert core.enabled(Level.FATAL)


class TestWrite:
    """write() 上报与 flush 行为测试"""

    def test_panic_write_flushes(self, spy, sentinel_time):
        """panic 级别写入后必须已 flush（wait 恰好一次）"""
        core = SentryCore(spy, level=Level.ERROR)
        entry = LogEntry(level=Level.PANIC, message="oh no", timestamp=sentinel_time)

        child = core.with_fields({"foo": "bar"})
        assert child.check(entry)
        child.write(entry, {"bar": "baz"})

        assert len(spy.packets) == 1
        assert spy.waits == 1

        packet = spy.packets[0]
        assert packet.message == "oh no"
        assert packet.level is Severity.FATAL
        assert packet.timestamp is sentinel_time
        assert packet.extra == {"foo": "bar", "bar": "baz"}

    def test_error_write_does_not_wait(self, spy, sentinel_time):
        core = SentryCore(spy)
        core.write(LogEntry(level=Level.ERROR, message="boom", timestamp=sentinel_time))

        assert len(spy.packets) == 1
        assert spy.waits == 0

    def test_unknown_level_is_fatal_tier(self, spy, sentinel_time):
        core = SentryCore(spy)
        core.write(LogEntry(level=100, message="???", timestamp=sentinel_time))

        assert spy.packets[0].level is Severity.FATAL
        assert spy.waits == 1

    def test_call_fields_do_not_leak_into_core(self, spy, sentinel_time):
        core = SentryCore(spy).with_fields({"component": "api"})
        core.write(LogEntry(level=Level.ERROR, message="m", timestamp=sentinel_time), {"request_id": "r-1"})

        assert dict(core.fields) == {"component": "api"}
        assert spy.packets[0].extra == {"component": "api", "request_id": "r-1"}

    def test_waits_on_own_completion_signal(self, sentinel_time):
        """fatal 写入阻塞到自身的完成信号触发为止"""

        class SlowTransport:
            def __init__(self):
                self.future: Future = Future()

            def capture(self, packet, tags=None):
                threading.Timer(0.05, self.future.set_result, args=("id",)).start()
                return "id", self.future

            def wait(self, done=None):
                done.result()

            def close(self):
                pass

        transport = SlowTransport()
        SentryCore(transport).write(LogEntry(level=Level.FATAL, message="bye", timestamp=sentinel_time))

        assert transport.future.done()

    def test_transport_failure_is_absorbed(self, sentinel_time, caplog):
        class BrokenTransport:
            waits = 0

            def capture(self, packet, tags=None):
                raise ConnectionError("backend unreachable")

            def wait(self, done=None):
                self.waits += 1

            def close(self):
                pass

        transport = BrokenTransport()
        with caplog.at_level(logging.WARNING, logger="sentrybridge.sentry.core"):
            SentryCore(transport).write(LogEntry(level=Level.PANIC, message="oh no", timestamp=sentinel_time))

        assert transport.waits == 0
        assert "Failed to capture Sentry report" in caplog.text

    def test_concurrent_writers_share_transport(self, spy, sentinel_time):
        root = SentryCore(spy)
        cores = [root.with_fields({"worker": i}) for i in range(8)]

        def run(core):
            for _ in range(25):
                core.write(LogEntry(level=Level.ERROR, message="m", timestamp=sentinel_time))

        threads = [threading.Thread(target=run, args=(core,)) for core in cores]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(spy.packets) == 200
        assert sorted({p.extra["worker"] for p in spy.packets}) == list(range(8))

    def test_sync_flushes_everything(self, spy):
        SentryCore(spy).sync()

        assert spy.flushes == 1
        assert spy.waits == 0

    def test_close_closes_transport(self, spy):
        SentryCore(spy).close()

        assert spy.closed


class TestBuildCore:
    """build_core() 配置校验测试"""

    def test_invalid_dsn_fails(self):
        with pytest.raises(ConfigurationError) as exc_info:
            build_core(SentrySettings(dsn="invalid"))

        assert exc_info.value.code == "CONFIGURATION_ERROR"

    def test_missing_dsn_fails(self):
        with pytest.raises(ConfigurationError):
            build_core(SentrySettings(dsn=None))

    def test_valid_dsn(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        core = build_core(
            SentrySettings(dsn="https://public@sentry.example.com/42", level="WARNING"),
            http_client=client,
        )
        try:
            assert isinstance(core.transport, HttpTransport)
            assert core.level == Level.WARNING
            assert dict(core.fields) == {}
        finally:
            core.close()
            client.close()
