"""Diagnostic item models and their wire representation."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class KeyValueTag:
    key: str
    value: str

    def to_dict(self) -> dict:
        return {"key": self.key, "value": self.value}


@dataclass
class ExceptionInfo:
    exception_type: Optional[str] = None
    message: Optional[str] = None
    source: Optional[str] = None
    stack_trace: Optional[str] = None
    data: list[KeyValueTag] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "exceptionType": self.exception_type,
            "message": self.message,
            "source": self.source,
            "stackTrace": self.stack_trace,
            "data": [tag.to_dict() for tag in self.data],
        }


@dataclass
class ProcessInfo:
    """Runtime context captured for exception enrichment."""

    cwd: str
    exec_path: str
    version: str
    argv: list[str] = field(default_factory=list)
    memory: Optional[dict] = None


@dataclass
class NormalizedItem:
    timestamp: str
    environment_name: Any = None
    machine_name: Any = None
    application_name: Any = None
    process_name: Any = None
    assembly_name: Any = None
    type_name: Any = None
    level: Any = "Info"
    code: Any = None
    message: Any = None
    group_name: Any = None
    exception: Any = None
    metadata: Optional[list[KeyValueTag]] = None
    trace_name: Any = None
    trace_data: Any = None
    trace_tags: Optional[list[KeyValueTag]] = None

    def to_dict(self) -> dict:
        """Convert to the camelCase wire form expected by the ingest endpoint."""
        exception = self.exception
        if isinstance(exception, ExceptionInfo):
            exception = exception.to_dict()
        return {
            "timestamp": self.timestamp,
            "environmentName": self.environment_name,
            "machineName": self.machine_name,
            "applicationName": self.application_name,
            "processName": self.process_name,
            "assemblyName": self.assembly_name,
            "typeName": self.type_name,
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "groupName": self.group_name,
            "exception": exception,
            "metadata": _tags_to_list(self.metadata),
            "traceName": self.trace_name,
            "traceData": self.trace_data,
            "traceTags": _tags_to_list(self.trace_tags),
        }


def _tags_to_list(tags: Optional[list[KeyValueTag]]) -> Optional[list[dict]]:
    if tags is None:
        return None
    return [tag.to_dict() for tag in tags]
