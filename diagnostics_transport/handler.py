"""Bridge from the standard ``logging`` module onto a DiagnosticsSink."""

import asyncio
import logging
from typing import Optional

from diagnostics_transport.sink import DiagnosticsSink

# Python level names mapped onto the input vocabulary the sink understands.
LEVEL_NAMES = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARNING": "warn",
    "ERROR": "error",
    "CRITICAL": "error",
}

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}

# Loggers that fire while a batch is being shipped must never feed back into it.
_INTERNAL_PREFIXES = ("diagnostics_transport", "httpx", "httpcore")


def record_to_raw(record: logging.LogRecord) -> dict:
    """Convert a LogRecord into a raw record dict for the sink."""
    raw = {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }
    raw["level"] = LEVEL_NAMES.get(record.levelname, record.levelname)
    raw["message"] = record.getMessage()
    raw.setdefault("type", record.name)
    if record.exc_info and record.exc_info[1] is not None:
        raw.setdefault("exception", record.exc_info[1])
    elif record.stack_info:
        raw.setdefault("stack", record.stack_info)
    return raw


class DiagnosticsHandler(logging.Handler):
    """logging.Handler that forwards records to a sink on its event loop.

    Records emitted from other threads are handed over with
    ``call_soon_threadsafe`` so the sink's state is only touched by its loop.
    """

    def __init__(
        self,
        sink: DiagnosticsSink,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        level=logging.NOTSET,
    ):
        super().__init__(level)
        self._sink = sink
        self._loop = loop or asyncio.get_running_loop()

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.startswith(_INTERNAL_PREFIXES):
            return
        try:
            raw = record_to_raw(record)
            if self._on_loop_thread():
                self._sink.handle(raw)
            else:
                self._loop.call_soon_threadsafe(self._sink.handle, raw)
        except Exception:
            self.handleError(record)

    def _on_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False
