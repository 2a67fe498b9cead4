"""In-memory TTL cache for the variable registry and content assets."""

import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from chartcalc.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Immutable snapshot; the cache swaps whole entries, never mutates one."""

    data: tuple[T, ...]
    fetched_at: float


class MetadataCache(Generic[T]):
    """TTL cache over an external collection.

    Provides an async accessor that refreshes when the snapshot is older
    than the TTL, and a synchronous accessor for call sites that cannot
    await, which only ever returns what is already cached.

    Refresh replaces the snapshot wholesale. Concurrent readers see either
    the old or the new snapshot.

    Cache TTL: 5 minutes (300 seconds) by default
    """

    DEFAULT_TTL = 300

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[Sequence[T]]],
        ttl_seconds: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize cache.

        Args:
            name: Collection name used in log messages
            fetch: Coroutine function loading the full collection
            ttl_seconds: Seconds a snapshot stays valid
            clock: Monotonic time source

        """
        self.name = name
        self._fetch = fetch
        self._ttl = ttl_seconds
        self._clock = clock
        self._entry: CacheEntry[T] | None = None

    @property
    def ttl(self) -> float:
        return self._ttl

    def age(self) -> float | None:
        """Seconds since the last refresh, or None if never loaded."""
        entry = self._entry
        if entry is None:
            return None
        return self._clock() - entry.fetched_at

    def is_valid(self) -> bool:
        """True if a snapshot exists and is younger than the TTL."""
        age = self.age()
        return age is not None and age < self._ttl

    async def refresh(self) -> list[T]:
        """Fetch the collection and replace the snapshot.

        Returns:
            Freshly fetched data

        Raises:
            Whatever the fetch function raises; the snapshot is left as is.

        """
        data = tuple(await self._fetch())
        self._entry = CacheEntry(data=data, fetched_at=self._clock())
        logger.info(f"Loaded {len(data)} {self.name} into cache", extra={"cache": self.name})
        return list(data)

    async def get(self) -> list[T]:
        """Return cached data, refreshing it if the TTL has expired.

        Returns:
            Cached or fresh data; empty list if the refresh failed

        """
        entry = self._entry
        if entry is not None and self._clock() - entry.fetched_at < self._ttl:
            logger.debug(f"Cache hit: {self.name}")
            return list(entry.data)

        logger.debug(f"Cache miss: {self.name}")
        try:
            return await self.refresh()
        except Exception as e:
            logger.warning(f"Failed to refresh {self.name}: {e}", extra={"cache": self.name})
            return []

    def get_cached(self) -> list[T]:
        """Return whatever is cached without refreshing.

        Returns:
            Current snapshot data (possibly expired), or empty list

        """
        entry = self._entry
        if entry is None:
            return []
        if self._clock() - entry.fetched_at >= self._ttl:
            logger.debug(f"Synchronous read of expired {self.name} cache")
        return list(entry.data)

    def invalidate(self) -> None:
        """Drop the snapshot; the next get() refreshes."""
        self._entry = None
