"""
In-memory request timestamp cache with per-entry expiry.

Maps a Vault request ID to the timestamp of its request event so the
matching response can compute latency. Every entry expires a fixed TTL
after insertion, whether or not a response ever reads it:

- Reads check expiry lazily and never extend an entry's lifetime
- A background sweep (see tasks/cache_cleanup_task.py) removes expired
  entries so memory stays bounded when responses never arrive

All operations take a single mutex, so the cache can be shared by the
event loop and any thread (such as a metrics scrape) at the same time.
Concurrent puts for the same ID are last-write-wins in lock order.
"""

import threading
import time
from typing import Callable

from vault_audit_exporter.logging import logger


class CacheEntry:
    """
    Cache entry with value and expiration time.

    Attributes:
        value: Raw request timestamp string.
        expires_at: Clock reading after which the entry is expired
            (None = no expiry).
    """

    __slots__ = ("value", "expires_at")

    def __init__(self, value: str, expires_at: float | None) -> None:
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: float) -> bool:
        """Check if entry has expired at clock reading ``now``."""
        if self.expires_at is None:
            return False
        return now > self.expires_at


class TimestampCache:
    """
    Expiring request ID → request timestamp mapping.

    Example:
        >>> cache = TimestampCache(ttl=300, cleanup_interval=60)
        >>> cache.put("0b7c...", "2024-01-01T00:00:00Z")
        >>> cache.get("0b7c...")
        '2024-01-01T00:00:00Z'
    """

    def __init__(
        self,
        ttl: float,
        cleanup_interval: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the cache.

        Args:
            ttl: Seconds an entry lives after insertion; <= 0 disables
                expiry.
            cleanup_interval: Seconds between background sweeps; <= 0
                disables the sweep.
            clock: Monotonic clock, injectable for tests.
        """
        self.ttl = ttl
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

        logger.info(
            f"Initialized TimestampCache: ttl={ttl}s, "
            f"cleanup_interval={cleanup_interval}s"
        )

    def put(self, request_id: str, timestamp: str) -> None:
        """
        Store the request timestamp for ``request_id``.

        An existing entry for the same ID is replaced and its lifetime
        restarts.
        """
        with self._lock:
            expires_at = self._clock() + self.ttl if self.ttl > 0 else None
            self._entries[request_id] = CacheEntry(timestamp, expires_at)

    def get(self, request_id: str) -> str | None:
        """
        Look up the request timestamp for ``request_id``.

        Returns:
            The stored timestamp, or None if absent or expired.
        """
        with self._lock:
            entry = self._entries.get(request_id)
            if entry is None or entry.is_expired(self._clock()):
                return None
            return entry.value

    def live_count(self) -> int:
        """Number of entries that have not expired yet."""
        with self._lock:
            now = self._clock()
            return sum(
                1 for entry in self._entries.values() if not entry.is_expired(now)
            )

    def delete_expired(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            now = self._clock()
            expired = [
                key
                for key, entry in self._entries.items()
                if entry.is_expired(now)
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(f"Evicted {len(expired)} expired request timestamps")
        return len(expired)

    def __len__(self) -> int:
        """Number of stored entries, including expired ones not yet swept."""
        with self._lock:
            return len(self._entries)
