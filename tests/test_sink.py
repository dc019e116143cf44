"""Tests for the DiagnosticsSink entry point."""

import asyncio
import dataclasses
import gzip
import json

import pytest

from diagnostics_transport.config import ConfigError
from diagnostics_transport.models import ExceptionInfo, ProcessInfo
from diagnostics_transport.sink import DiagnosticsSink
from diagnostics_transport.transport import BatchTransport

from conftest import FIXED_TIMESTAMP


def _make_sink(config, environment, endpoint, **overrides):
    if overrides:
        config = dataclasses.replace(config, **overrides)
    transport = BatchTransport(config.url, client=endpoint.client())
    return DiagnosticsSink(
        config, environment=environment, transport=transport, clock=lambda: FIXED_TIMESTAMP
    )


def _bodies(endpoint) -> list[list[dict]]:
    return [json.loads(gzip.decompress(r.content)) for r in endpoint.requests]


class TestConstruction:
    def test_missing_endpoint_fails_fast(self, environment):
        with pytest.raises(ConfigError, match="endpoint"):
            DiagnosticsSink({"environment": "prod"}, environment=environment)

    def test_missing_environment_fails_fast(self, environment):
        with pytest.raises(ConfigError, match="environment"):
            DiagnosticsSink({"endpoint": "diag.local"}, environment=environment)

    def test_accepts_mapping(self, environment):
        sink = DiagnosticsSink({"endpoint": "diag.local", "environment": "prod"}, environment=environment)
        assert sink.name == "diagnostics"
        assert sink.config.url == "http://diag.local:80/api/diagnostics/ingest"


class TestHandle:
    @pytest.mark.asyncio
    async def test_record_form_buffers_item(self, config, environment, endpoint):
        sink = _make_sink(config, environment, endpoint)
        calls = []

        item = sink.handle({"level": "info", "message": "hello"}, lambda: calls.append(1))

        assert calls == [1]
        assert item.level == "InfoBasic"
        assert sink.pending_count == 1
        assert endpoint.requests == []
        await sink.close()

    @pytest.mark.asyncio
    async def test_legacy_four_argument_form(self, config, environment, endpoint):
        sink = _make_sink(config, environment, endpoint)
        calls = []

        item = sink.handle("warn", "disk almost full", {"code": "DISK"}, lambda: calls.append(1))

        assert calls == [1]
        assert item.level == "Warning"
        assert item.message == "disk almost full"
        assert item.code == "DISK"
        await sink.close()

    @pytest.mark.asyncio
    async def test_error_level_ships_without_timer(self, config, environment, endpoint):
        sink = _make_sink(config, environment, endpoint)
        sink.handle({"level": "info", "message": "before"})
        sink.handle({"level": "error", "message": "failed"})

        assert sink.pending_count == 0
        await sink.close()

        [body] = _bodies(endpoint)
        assert [item["message"] for item in body] == ["before", "failed"]
        assert body[1]["level"] == "Error"

    @pytest.mark.asyncio
    async def test_observers_notified_on_next_iteration(self, config, environment, endpoint):
        sink = _make_sink(config, environment, endpoint)
        seen = []
        sink.subscribe(lambda *args: seen.append(args))

        record = {"message": "hello"}
        sink.handle(record)
        assert seen == []

        await asyncio.sleep(0)
        assert seen == [(record,)]
        await sink.close()

    @pytest.mark.asyncio
    async def test_failing_observer_does_not_break_others(self, config, environment, endpoint):
        sink = _make_sink(config, environment, endpoint)
        seen = []

        def broken(*args):
            raise RuntimeError("observer down")

        sink.subscribe(broken)
        sink.subscribe(lambda *args: seen.append(args))
        sink.handle({"message": "hello"})
        await asyncio.sleep(0)

        assert len(seen) == 1
        await sink.close()

    @pytest.mark.asyncio
    async def test_normalization_failure_still_calls_back(self, config, environment, endpoint, monkeypatch):
        sink = _make_sink(config, environment, endpoint)
        calls = []

        def explode(record):
            raise RuntimeError("bad record")

        monkeypatch.setattr(sink._normalizer, "normalize", explode)
        result = sink.handle({"message": "x"}, lambda: calls.append(1))

        assert result is None
        assert calls == [1]
        assert sink.pending_count == 0
        await sink.close()

    @pytest.mark.asyncio
    async def test_bare_string_record_becomes_message(self, config, environment, endpoint):
        sink = _make_sink(config, environment, endpoint)
        item = sink.handle("just text")
        assert item.message == "just text"
        assert item.level == "Info"
        await sink.close()

    @pytest.mark.asyncio
    async def test_wrong_arity_raises(self, config, environment, endpoint):
        sink = _make_sink(config, environment, endpoint)
        with pytest.raises(TypeError):
            sink.handle("info", "message", {})
        await sink.close()


class TestBuffering:
    @pytest.mark.asyncio
    async def test_buffer_bounded(self, config, environment, endpoint):
        sink = _make_sink(config, environment, endpoint, buffer_size=3)
        for i in range(4):
            sink.handle({"message": f"log-{i}"})

        assert sink.pending_count == 3
        assert sink.stats()["evicted"] == 1
        await sink.close()

    @pytest.mark.asyncio
    async def test_timer_ships_buffered_items(self, config, environment, endpoint):
        sink = _make_sink(config, environment, endpoint, flush_interval=0.05)
        await sink.start()
        sink.handle({"message": "periodic"})

        await asyncio.sleep(0.2)
        assert sink.pending_count == 0
        await sink.close()

        [body] = _bodies(endpoint)
        assert body[0]["message"] == "periodic"
        assert body[0]["environmentName"] == "test"
        assert body[0]["machineName"] == "test-host"

    @pytest.mark.asyncio
    async def test_close_flushes_remaining(self, config, environment, endpoint):
        async with _make_sink(config, environment, endpoint) as sink:
            sink.handle({"message": "last words"})

        [body] = _bodies(endpoint)
        assert body[0]["message"] == "last words"
        assert sink.stats()["batches_sent"] == 1

    @pytest.mark.asyncio
    async def test_empty_flush_issues_no_request(self, config, environment, endpoint):
        sink = _make_sink(config, environment, endpoint)
        assert sink.flush() is None
        await sink.close()
        assert endpoint.requests == []


class TestReportException:
    @pytest.mark.asyncio
    async def test_reports_and_flushes_immediately(self, config, environment, endpoint):
        sink = _make_sink(config, environment, endpoint)
        captured = ProcessInfo(cwd="/tmp/crash", exec_path="/opt/py", version="3.11.0", argv=["job"])

        try:
            raise ValueError("nightly job failed")
        except ValueError as exc:
            item = sink.report_exception(exc, process_info=captured, group="jobs")

        assert isinstance(item.exception, ExceptionInfo)
        assert item.level == "Error"
        assert item.group_name == "jobs"
        assert sink.pending_count == 0

        await sink.close()
        [body] = _bodies(endpoint)
        exception = body[0]["exception"]
        assert exception["exceptionType"] == "ValueError"
        assert exception["message"] == "nightly job failed"
        assert {"key": "cwd", "value": "/tmp/crash"} in exception["data"]

    @pytest.mark.asyncio
    async def test_non_error_level_still_flushes(self, config, environment, endpoint):
        sink = _make_sink(config, environment, endpoint)
        sink.report_exception(RuntimeError("soft failure"), level="warn")
        assert sink.pending_count == 0
        await sink.close()
        assert len(endpoint.requests) == 1
