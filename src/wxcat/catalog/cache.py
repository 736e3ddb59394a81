"""Time-bounded snapshot cache keyed by settings fingerprint."""

from __future__ import annotations

import threading
import time
from typing import Callable

from .models import CatalogSnapshot

DEFAULT_TTL_SECONDS = 300.0


class SnapshotCache:
    """Keep recent snapshots so repeated scans skip the filesystem."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._items: dict[str, tuple[float, CatalogSnapshot]] = {}

    def get(self, key: str) -> CatalogSnapshot | None:
        """Return the snapshot stored under ``key`` if it is younger than the TTL."""
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            stored_at, snapshot = item
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._items[key]
                return None
            return snapshot

    def put(self, key: str, snapshot: CatalogSnapshot) -> None:
        """Store ``snapshot`` under ``key``, replacing any previous value."""
        with self._lock:
            self._items[key] = (self._clock(), snapshot)

    def clear(self) -> None:
        """Drop every cached snapshot."""
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


__all__ = ["DEFAULT_TTL_SECONDS", "SnapshotCache"]
