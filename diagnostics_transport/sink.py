"""Diagnostics sink — the entry point a logging front-end hands records to."""

import asyncio
import logging
from typing import Any, Callable, Mapping, Optional, Protocol, Union

from diagnostics_transport.buffer import BufferedQueue
from diagnostics_transport.config import SinkConfig
from diagnostics_transport.environment import EnvironmentProvider, SystemEnvironment
from diagnostics_transport.exception_info import from_exception
from diagnostics_transport.models import NormalizedItem, ProcessInfo
from diagnostics_transport.normalizer import Normalizer, local_timestamp
from diagnostics_transport.scheduler import FlushScheduler
from diagnostics_transport.transport import BatchTransport

logger = logging.getLogger(__name__)


def _as_record(value: Any) -> dict:
    """Copy a mapping into a fresh record; anything else becomes its message."""
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    return {"message": value}


class LogSink(Protocol):
    name: str

    def handle(self, *args) -> Optional[NormalizedItem]: ...

    def subscribe(self, observer: Callable[..., Any]) -> None: ...


class DiagnosticsSink:
    """Normalizes records, buffers them and ships batches to the endpoint.

    Accepts either ``handle(record, callback=None)`` or the legacy form
    ``handle(level, message, extra, callback)``. Must be used from the event
    loop that owns it; the original call arguments are re-emitted to observers
    on the next loop iteration.
    """

    def __init__(
        self,
        config: Union[SinkConfig, Mapping],
        environment: Optional[EnvironmentProvider] = None,
        transport: Optional[BatchTransport] = None,
        clock: Callable[[], str] = local_timestamp,
    ):
        if not isinstance(config, SinkConfig):
            config = SinkConfig(**config)
        self._config = config
        self.name = config.name
        self._environment = environment or SystemEnvironment()
        self._normalizer = Normalizer(config, self._environment, clock)
        self._queue = BufferedQueue(config.buffer_size, config.eviction)
        self._transport = transport or BatchTransport(config.url)
        self._scheduler = FlushScheduler(self._queue, self._transport, config.flush_interval)
        self._observers: list[Callable[..., Any]] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        self._scheduler.start()
        logger.info(
            "Diagnostics sink %r shipping to %s every %.1fs (buffer %d)",
            self.name,
            self._config.url,
            self._config.flush_interval,
            self._config.buffer_size,
        )

    async def close(self) -> None:
        await self._scheduler.stop()
        await self._transport.aclose()
        logger.info("Diagnostics sink %r closed: %s", self.name, self.stats())

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def subscribe(self, observer: Callable[..., Any]) -> None:
        """Register *observer* to receive the original arguments of each call."""
        self._observers.append(observer)

    def handle(self, *args) -> Optional[NormalizedItem]:
        if len(args) == 4:
            level, message, extra, callback = args
            record = _as_record(extra)
            record["level"] = level
            record["message"] = message
        elif len(args) in (1, 2):
            record = _as_record(args[0])
            callback = args[1] if len(args) == 2 else None
        else:
            raise TypeError(
                f"handle() takes (record[, callback]) or "
                f"(level, message, extra, callback), got {len(args)} arguments"
            )

        asyncio.get_running_loop().call_soon(self._notify, args)

        item = None
        try:
            item = self._normalizer.normalize(record)
            self._scheduler.append(item)
        except Exception:
            logger.exception("Dropping record that could not be normalized")
        finally:
            if callable(callback):
                callback()
        return item

    def report_exception(
        self,
        exc: BaseException,
        process_info: Optional[ProcessInfo] = None,
        **fields,
    ) -> NormalizedItem:
        """Report *exc* out of band and flush immediately.

        *process_info* lets callers pass runtime context captured at the time
        of the failure instead of reading it now.
        """
        record = dict(fields)
        record.setdefault("level", "error")
        record.setdefault("message", str(exc) or type(exc).__name__)
        item = self._normalizer.normalize(record)
        item.exception = from_exception(
            exc, environment=self._environment, process_info=process_info
        )
        self._scheduler.append(item, force_flush=True)
        return item

    def flush(self) -> Optional[asyncio.Task]:
        return self._scheduler.flush()

    def stats(self) -> dict:
        return {
            "pending": self._scheduler.pending_count,
            "evicted": self._queue.evicted_count,
            "batches_sent": self._transport.batches_sent,
            "batches_failed": self._transport.batches_failed,
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _notify(self, args: tuple) -> None:
        for observer in list(self._observers):
            try:
                observer(*args)
            except Exception:
                logger.exception("Observer %r failed", observer)

    @property
    def config(self) -> SinkConfig:
        return self._config

    @property
    def pending_count(self) -> int:
        return self._scheduler.pending_count
