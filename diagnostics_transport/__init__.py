"""Normalize loosely shaped log records and ship them to a diagnostics endpoint."""

from diagnostics_transport.config import ConfigError, SinkConfig, load_config
from diagnostics_transport.handler import DiagnosticsHandler
from diagnostics_transport.models import ExceptionInfo, KeyValueTag, NormalizedItem, ProcessInfo
from diagnostics_transport.sink import DiagnosticsSink, LogSink

__all__ = [
    "ConfigError",
    "DiagnosticsHandler",
    "DiagnosticsSink",
    "ExceptionInfo",
    "KeyValueTag",
    "LogSink",
    "NormalizedItem",
    "ProcessInfo",
    "SinkConfig",
    "load_config",
]
