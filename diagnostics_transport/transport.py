"""Batch transport — gzip-compressed JSON POSTs to the diagnostics endpoint.

Sends are fire-and-forget: each batch gets exactly one attempt on a detached
task, and the outcome is only ever logged. A batch that fails to send is lost.
"""

import asyncio
import logging
import time
from typing import Optional

import httpx

from diagnostics_transport.models import NormalizedItem
from diagnostics_transport.serializer import compress_payload, serialize_batch

logger = logging.getLogger(__name__)

HEADERS = {
    "Content-Type": "application/json",
    "Content-Encoding": "gzip",
}

DEFAULT_TIMEOUT = 10.0


class BatchTransport:
    """Ships batches over HTTP without making callers wait for the response."""

    def __init__(
        self,
        url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._pending: set[asyncio.Task] = set()
        self._batches_sent = 0
        self._batches_failed = 0

    def send(self, batch: list[NormalizedItem]) -> asyncio.Task:
        """Schedule one POST for *batch* and return the detached task."""
        task = asyncio.get_running_loop().create_task(self._post(batch))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _post(self, batch: list[NormalizedItem]) -> None:
        start = time.monotonic()
        try:
            payload = serialize_batch(batch)
            body = await asyncio.to_thread(compress_payload, payload)
            response = await self._client.post(self._url, content=body, headers=HEADERS)
        except (httpx.HTTPError, OSError) as exc:
            self._batches_failed += 1
            logger.error("Failed to send batch of %d items: %s", len(batch), exc)
            return
        except Exception:
            self._batches_failed += 1
            logger.exception("Unexpected error sending batch of %d items", len(batch))
            return

        self._batches_sent += 1
        logger.debug(
            "Sent batch of %d items (%d bytes, status %d) in %.1fms",
            len(batch),
            len(body),
            response.status_code,
            (time.monotonic() - start) * 1000,
        )

    async def drain(self) -> None:
        """Wait for every in-flight send to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()
        if self._owns_client:
            await self._client.aclose()

    @property
    def in_flight(self) -> int:
        return len(self._pending)

    @property
    def batches_sent(self) -> int:
        return self._batches_sent

    @property
    def batches_failed(self) -> int:
        return self._batches_failed
