"""WorkQueue: thread-safe dispatch of repository paths to workers."""

from __future__ import annotations

import threading
from collections import deque
from typing import NamedTuple


class WorkItem(NamedTuple):
    index: int
    path: str


class WorkQueue:
    """Ordered queue where each path is handed out exactly once.

    Items taken but not yet completed are tracked as in-flight so a worker
    that dies mid-scan can be detected after the pool joins. ``close()``
    stops dispatch; undispatched items stay available via :meth:`pending`.
    """

    def __init__(self, paths) -> None:
        self._lock = threading.Lock()
        self._items: deque[WorkItem] = deque(WorkItem(i, str(p)) for i, p in enumerate(paths))
        self._total = len(self._items)
        self._in_flight: dict[int, WorkItem] = {}
        self._completed = 0
        self._closed = False

    def __len__(self) -> int:
        return self._total

    @property
    def closed(self) -> bool:
        return self._closed

    def take(self) -> WorkItem | None:
        """Return the next item, or None when empty or closed."""
        with self._lock:
            if self._closed or not self._items:
                return None
            item = self._items.popleft()
            self._in_flight[item.index] = item
            return item

    def complete(self, item: WorkItem) -> int:
        """Mark *item* done; returns the number of completed items."""
        with self._lock:
            if self._in_flight.pop(item.index, None) is not None:
                self._completed += 1
            return self._completed

    def close(self) -> None:
        with self._lock:
            self._closed = True

    def pending(self) -> list[WorkItem]:
        with self._lock:
            return list(self._items)

    def in_flight(self) -> list[WorkItem]:
        with self._lock:
            return sorted(self._in_flight.values())
