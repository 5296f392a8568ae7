"""In-memory read-through cache with TTL expiry."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fused results are cheap to rebuild but providers rate-limit bursts
FUSED_EVENTS_TTL = 60


class TTLCache(Generic[T]):
    """Age-invalidated cache keyed by query.

    The clock is injectable so expiry can be tested without sleeping.
    Entries are never invalidated by anything other than age.
    """

    def __init__(
        self,
        ttl_seconds: float = FUSED_EVENTS_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, T]] = {}
        self._lock = threading.Lock()
        self._key_locks: dict[Hashable, threading.Lock] = {}

    def get(self, key: Hashable) -> T | None:
        """Return the cached value if fresh, else None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                logger.debug("Cache expired for %s", key)
                del self._entries[key]
                return None
        logger.debug("Cache hit for %s", key)
        return value

    def put(self, key: Hashable, value: T) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def get_or_compute(self, key: Hashable, compute: Callable[[], T]) -> T:
        """Return the cached value, computing and storing it on a miss.

        Concurrent misses on the same key wait for a single compute.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())
        with key_lock:
            cached = self.get(key)
            if cached is not None:
                return cached
            value = compute()
            self.put(key, value)
            return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
