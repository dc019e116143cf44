"""Shared pytest fixtures for the diagnostics-transport test suite."""

from __future__ import annotations

import httpx
import pytest

from diagnostics_transport.config import SinkConfig
from diagnostics_transport.models import ProcessInfo

FIXED_TIMESTAMP = "2026-01-15T10:30:00.000"


class StaticEnvironment:
    """Environment provider returning fixed values, no OS calls."""

    def __init__(self, memory: dict | None = None):
        self._memory = memory if memory is not None else {"rss": 1024, "heapTotal": 4096, "heapUsed": 512}

    def hostname(self) -> str:
        return "test-host"

    def process_title(self) -> str:
        return "test-proc"

    def process_info(self) -> ProcessInfo:
        return ProcessInfo(
            cwd="/srv/app",
            exec_path="/usr/bin/python3",
            version="3.12.1",
            argv=["app.py", "--serve"],
            memory=self.memory_usage(),
        )

    def memory_usage(self) -> dict | None:
        return self._memory


class RecordingEndpoint:
    """httpx MockTransport handler that records every request it receives."""

    def __init__(self, status_code: int = 202, error: Exception | None = None):
        self.requests: list[httpx.Request] = []
        self._status_code = status_code
        self._error = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        return httpx.Response(self._status_code, json={"status": "accepted"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture()
def environment() -> StaticEnvironment:
    return StaticEnvironment()


@pytest.fixture()
def config() -> SinkConfig:
    return SinkConfig(endpoint="diag.example.com", environment="test")


@pytest.fixture()
def endpoint() -> RecordingEndpoint:
    return RecordingEndpoint()
