"""In-memory TTL cache for generated template workbooks.

Entries use a sliding expiry: every successful read pushes the expiry
forward by the configured TTL. Values are computed outside the lock, so two
concurrent misses may both run the factory; the first value stored wins and
the other is discarded.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from sheetlink.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A cached value and its monotonic expiry time."""

    value: T
    expires_at: float


class TemplateCache(Generic[T]):
    """Thread-safe key/value store with sliding time-based expiry."""

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Lifetime of an entry after its last access.
            clock: Monotonic time source, replaceable in tests.
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> T | None:
        """Return a live entry and refresh its expiry, or None."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if now >= entry.expires_at:
                del self._entries[key]
                logger.debug("Cache entry expired", key=key)
                return None
            entry.expires_at = now + self.ttl_seconds
            return entry.value

    def set(self, key: str, value: T) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(
                value=value, expires_at=self._clock() + self.ttl_seconds
            )

    def get_or_create(self, key: str, factory: Callable[[], T]) -> T:
        """Return the cached value for ``key``, computing it on a miss.

        Args:
            key: Cache key.
            factory: Side-effect-free callable producing the value.

        Returns:
            The cached or newly computed value.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        self.cleanup_expired()
        value = factory()

        with self._lock:
            # Another thread may have populated the key while we computed
            existing = self.get(key)
            if existing is not None:
                return existing
            self.set(key, value)

        logger.debug("Cache entry populated", key=key)
        return value

    def cleanup_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        with self._lock:
            expired = [
                key for key, entry in self._entries.items() if now >= entry.expires_at
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.info("Cleaned up expired cache entries", count=len(expired))
        return len(expired)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
