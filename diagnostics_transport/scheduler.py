"""Flush scheduler — periodic and immediate flushes of the item buffer."""

import asyncio
import logging
from typing import Optional

from diagnostics_transport.buffer import BufferedQueue
from diagnostics_transport.levels import ERROR_LEVEL
from diagnostics_transport.models import NormalizedItem
from diagnostics_transport.transport import BatchTransport

logger = logging.getLogger(__name__)


class FlushScheduler:
    """Owns the buffer and decides when a batch is handed to the transport.

    A batch leaves the buffer when the periodic timer fires, when an item at
    Error level is appended, or when a caller asks for it explicitly.
    Everything runs on one event loop, so append and flush never interleave.
    """

    def __init__(
        self,
        queue: BufferedQueue,
        transport: BatchTransport,
        flush_interval: float,
    ):
        self._queue = queue
        self._transport = transport
        self._flush_interval = flush_interval
        self._timer: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._timer is None:
            self._timer = asyncio.get_running_loop().create_task(self._run_timer())

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self._flush_interval)
            self.flush()

    def append(self, item: NormalizedItem, force_flush: bool = False) -> None:
        self._queue.append(item)
        if force_flush or item.level == ERROR_LEVEL:
            self.flush()

    def flush(self) -> Optional[asyncio.Task]:
        """Detach the buffered items and send them; no-op when empty."""
        batch = self._queue.flush()
        if not batch:
            return None
        logger.debug("Flushing batch of %d items", len(batch))
        return self._transport.send(batch)

    async def stop(self) -> None:
        """Cancel the timer, flush what is left and wait for in-flight sends."""
        if self._timer is not None:
            self._timer.cancel()
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
            self._timer = None
        self.flush()
        await self._transport.drain()

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()
