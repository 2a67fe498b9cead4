"""Unit tests for the metadata TTL cache."""

import pytest

from chartcalc.cache.metadata_cache import MetadataCache
from chartcalc.core.exceptions import MetadataFetchError


class CountingFetch:
    """Fetch coroutine returning a new batch per call, optionally failing."""

    def __init__(self) -> None:
        self.calls = 0
        self.fail = False

    async def __call__(self) -> list[str]:
        self.calls += 1
        if self.fail:
            raise MetadataFetchError("variables", "connection refused")
        return [f"batch-{self.calls}"]


@pytest.fixture
def fetch() -> CountingFetch:
    return CountingFetch()


@pytest.fixture
def cache(fetch, clock) -> MetadataCache[str]:
    return MetadataCache("variables", fetch, ttl_seconds=300, clock=clock)


class TestMetadataCache:
    """Tests for MetadataCache."""

    @pytest.mark.asyncio
    async def test_first_get_fetches(self, cache, fetch):
        assert await cache.get() == ["batch-1"]
        assert fetch.calls == 1

    @pytest.mark.asyncio
    async def test_get_within_ttl_hits(self, cache, fetch, clock):
        await cache.get()
        clock.advance(299)
        assert await cache.get() == ["batch-1"]
        assert fetch.calls == 1

    @pytest.mark.asyncio
    async def test_get_after_ttl_refreshes(self, cache, fetch, clock):
        await cache.get()
        clock.advance(300)
        assert await cache.get() == ["batch-2"]
        assert fetch.calls == 2

    @pytest.mark.asyncio
    async def test_failed_refresh_returns_empty(self, cache, fetch):
        fetch.fail = True
        assert await cache.get() == []
        assert cache.age() is None

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_snapshot(self, cache, fetch, clock):
        await cache.get()
        clock.advance(301)
        fetch.fail = True
        assert await cache.get() == []
        # Synchronous readers still see the previous snapshot
        assert cache.get_cached() == ["batch-1"]

    @pytest.mark.asyncio
    async def test_failed_refresh_retried_next_get(self, cache, fetch):
        fetch.fail = True
        await cache.get()
        fetch.fail = False
        assert await cache.get() == ["batch-2"]

    @pytest.mark.asyncio
    async def test_refresh_raises(self, cache, fetch):
        fetch.fail = True
        with pytest.raises(MetadataFetchError):
            await cache.refresh()

    def test_get_cached_empty(self, cache, fetch):
        """The synchronous accessor never fetches."""
        assert cache.get_cached() == []
        assert fetch.calls == 0

    @pytest.mark.asyncio
    async def test_get_cached_returns_expired(self, cache, fetch, clock):
        await cache.get()
        clock.advance(1000)
        assert cache.get_cached() == ["batch-1"]
        assert fetch.calls == 1

    @pytest.mark.asyncio
    async def test_returned_list_is_a_copy(self, cache):
        first = await cache.get()
        first.append("mutated")
        assert await cache.get() == ["batch-1"]

    @pytest.mark.asyncio
    async def test_age_and_validity(self, cache, clock):
        assert cache.is_valid() is False
        await cache.get()
        clock.advance(42)
        assert cache.age() == 42
        assert cache.is_valid() is True
        clock.advance(258)
        assert cache.is_valid() is False

    @pytest.mark.asyncio
    async def test_invalidate(self, cache, fetch):
        await cache.get()
        cache.invalidate()
        assert cache.get_cached() == []
        assert await cache.get() == ["batch-2"]

    def test_ttl(self, fetch):
        assert MetadataCache("x", fetch).ttl == MetadataCache.DEFAULT_TTL
