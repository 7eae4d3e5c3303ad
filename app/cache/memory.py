"""In-process TTL cache with lazy eviction."""

import copy
import threading
import time
from typing import Any, Callable

from app.app_types import CacheEntry
from app.cache.base import TTLCache

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__)


class InMemoryTTLCache(TTLCache):
    """Thread-safe TTL cache; expired entries are evicted when next read.

    Two concurrent misses on one key will both fetch upstream and both write;
    the later write wins.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty cache using `clock` (seconds) as its time source."""
        logger.debug("Initializing InMemoryTTLCache")
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        """Return a copy of the stored value, or `default` if missing/expired.

        Pass a sentinel as `default` to tell a cached None apart from a miss.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if self._clock() >= entry.expires_at:
                self._entries.pop(key, None)
                logger.debug("Evicted expired cache entry", extra={"key": key})
                return default
            return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a private copy of `value` for `ttl_seconds`."""
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        entry = CacheEntry(value=copy.deepcopy(value), expires_at=self._clock() + ttl_seconds)
        with self._lock:
            self._entries[key] = entry

    def delete(self, key: str) -> None:
        """Remove an entry if it exists."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Clear all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
