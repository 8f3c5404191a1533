#  StyleMirror Gateway - Counter Store Tests
#
#  Tests for the in-memory and Redis-backed counter stores.
#
#  Depends on: gateway/services/counter_store.py
#  Used by:    pytest

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from gateway.exceptions import StoreUnavailableError
from gateway.services.counter_store import (
    PURGE_INTERVAL,
    MemoryCounterStore,
    RedisCounterStore,
    build_counter_store,
)


# ---------------------------------------------------------------------------
# MemoryCounterStore
# ---------------------------------------------------------------------------

class TestMemoryCounterStore:
    async def test_missing_key_returns_none(self, memory_store):
        assert await memory_store.get("nope") is None

    async def test_put_then_get(self, memory_store):
        await memory_store.put("k", "3", ttl=60)
        assert await memory_store.get("k") == "3"

    async def test_overwrite(self, memory_store):
        await memory_store.put("k", "1", ttl=60)
        await memory_store.put("k", "2", ttl=60)
        assert await memory_store.get("k") == "2"

    async def test_expires_after_ttl(self, memory_store, clock):
        await memory_store.put("k", "1", ttl=60)
        clock.advance(59)
        assert await memory_store.get("k") == "1"
        clock.advance(1)
        assert await memory_store.get("k") is None

    async def test_put_purges_expired_entries_once_per_interval(self, memory_store, clock):
        await memory_store.put("old", "1", ttl=10)
        clock.advance(11)
        await memory_store.put("new", "1", ttl=10)
        assert len(memory_store) == 2  # sweep not due yet

        clock.advance(PURGE_INTERVAL)
        await memory_store.put("newer", "1", ttl=10)
        assert len(memory_store) == 1

    async def test_puts_between_sweeps_do_not_scan(self, clock):
        store = MemoryCounterStore(clock=clock, purge_interval=30)
        for i in range(5):
            await store.put(f"k{i}", "1", ttl=1)
        clock.advance(29)
        with patch.object(store, "_purge_expired", wraps=store._purge_expired) as sweep:
            for i in range(100):
                await store.put(f"n{i}", "1", ttl=60)
            sweep.assert_not_called()
            clock.advance(1)
            await store.put("due", "1", ttl=60)
            sweep.assert_called_once()
        assert len(store) == 101

    async def test_close_is_noop(self, memory_store):
        await memory_store.close()


# ---------------------------------------------------------------------------
# RedisCounterStore
# ---------------------------------------------------------------------------

class TestRedisCounterStore:
    async def test_get_returns_value(self):
        client = MagicMock()
        client.get = AsyncMock(return_value="7")
        store = RedisCounterStore(client)
        assert await store.get("search:alice:1") == "7"
        client.get.assert_awaited_once_with("search:alice:1")

    async def test_get_decodes_bytes(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=b"7")
        store = RedisCounterStore(client)
        assert await store.get("k") == "7"

    async def test_put_sets_expiry(self):
        client = MagicMock()
        client.set = AsyncMock()
        store = RedisCounterStore(client)
        await store.put("k", "1", ttl=3600)
        client.set.assert_awaited_once_with("k", "1", ex=3600)

    async def test_get_failure_raises_store_unavailable(self):
        client = MagicMock()
        client.get = AsyncMock(side_effect=RedisConnectionError("refused"))
        store = RedisCounterStore(client)
        with pytest.raises(StoreUnavailableError):
            await store.get("k")

    async def test_put_failure_raises_store_unavailable(self):
        client = MagicMock()
        client.set = AsyncMock(side_effect=RedisTimeoutError("slow"))
        store = RedisCounterStore(client)
        with pytest.raises(StoreUnavailableError):
            await store.put("k", "1", ttl=60)

    async def test_close_closes_client(self):
        client = MagicMock()
        client.aclose = AsyncMock()
        store = RedisCounterStore(client)
        await store.close()
        client.aclose.assert_awaited_once()


class TestBuildCounterStore:
    def test_memory_backend(self):
        assert isinstance(build_counter_store("memory"), MemoryCounterStore)

    def test_redis_backend(self):
        with patch("gateway.services.counter_store.aioredis.Redis.from_url") as from_url:
            store = build_counter_store("redis", "redis://localhost:6379/0")
        assert isinstance(store, RedisCounterStore)
        from_url.assert_called_once_with("redis://localhost:6379/0", decode_responses=True)

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValueError):
            build_counter_store("memcached")
