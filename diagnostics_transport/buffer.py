"""Bounded item buffer — holds normalized items until the next flush."""

import logging
from collections import deque

from diagnostics_transport.models import NormalizedItem

logger = logging.getLogger(__name__)


class BufferedQueue:
    """Ordered, capacity-bounded buffer of NormalizedItems.

    When full, one resident item is evicted before the new one is appended:
    the oldest under the default ``"oldest"`` policy, or the most recently
    added under ``"newest"``.
    """

    def __init__(self, capacity: int, eviction: str = "oldest"):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        if eviction not in ("oldest", "newest"):
            raise ValueError(f"Unsupported eviction policy: {eviction}")
        self._capacity = capacity
        self._eviction = eviction
        self._items: deque[NormalizedItem] = deque()
        self._evicted = 0

    def append(self, item: NormalizedItem) -> None:
        if len(self._items) >= self._capacity:
            if self._eviction == "oldest":
                self._items.popleft()
            else:
                self._items.pop()
            self._evicted += 1
            logger.debug("Buffer full (%d), evicted %s item", self._capacity, self._eviction)
        self._items.append(item)

    def flush(self) -> list[NormalizedItem]:
        """Detach and return everything currently buffered."""
        batch = list(self._items)
        self._items.clear()
        return batch

    def __len__(self) -> int:
        return len(self._items)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def evicted_count(self) -> int:
        return self._evicted
