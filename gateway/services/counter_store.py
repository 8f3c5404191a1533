#  StyleMirror Gateway - Counter Store
#
#  Key-value store with per-key TTL backing the rate limiter.
#  MemoryCounterStore: single process, for development and tests.
#  RedisCounterStore: shared across every worker instance.
#
#  Depends on: exceptions.py, models/enums.py
#  Used by:    container.py, services/rate_limiter.py

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from gateway.exceptions import StoreUnavailableError
from gateway.models.enums import StoreBackend

logger = logging.getLogger("gateway.counter_store")

# Seconds between sweeps of expired entries in MemoryCounterStore
PURGE_INTERVAL = 60.0


class CounterStore(ABC):
    """Async get/put with time-to-live. Values are returned as raw strings."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if missing or expired."""
        ...

    @abstractmethod
    async def put(self, key: str, value: str, ttl: int) -> None:
        """Store value under key, expiring after ttl seconds."""
        ...

    async def close(self) -> None:
        """Release any connections held by the store."""


class MemoryCounterStore(CounterStore):
    """Dict-backed store with lazy expiry.

    Counts are not shared between processes, so limits are per worker.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, purge_interval: float = PURGE_INTERVAL):
        self._clock = clock
        self._purge_interval = purge_interval
        self._next_purge = clock() + purge_interval
        self._data: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    async def put(self, key: str, value: str, ttl: int) -> None:
        now = self._clock()
        self._data[key] = (value, now + ttl)
        if now >= self._next_purge:
            self._purge_expired(now)

    def _purge_expired(self, now: float):
        # Old windows are never read again; sweep at most once per interval
        self._next_purge = now + self._purge_interval
        stale = [k for k, (_, exp) in self._data.items() if now >= exp]
        for k in stale:
            del self._data[k]

    def __len__(self) -> int:
        return len(self._data)


class RedisCounterStore(CounterStore):
    """Redis-backed store. Any Redis failure surfaces as StoreUnavailableError."""

    def __init__(self, client: aioredis.Redis):
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCounterStore":
        return cls(aioredis.Redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> str | None:
        try:
            value = await self._redis.get(key)
        except RedisError as e:
            logger.warning("Counter store read failed for %s: %s", key, e)
            raise StoreUnavailableError("Rate limit store unavailable") from e
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def put(self, key: str, value: str, ttl: int) -> None:
        try:
            await self._redis.set(key, value, ex=ttl)
        except RedisError as e:
            logger.warning("Counter store write failed for %s: %s", key, e)
            raise StoreUnavailableError("Rate limit store unavailable") from e

    async def close(self) -> None:
        await self._redis.aclose()


def build_counter_store(backend: str, redis_url: str = "") -> CounterStore:
    """Create the configured store. validate_config() has already checked the inputs."""
    if StoreBackend(backend) is StoreBackend.REDIS:
        logger.info("Using Redis counter store")
        return RedisCounterStore.from_url(redis_url)
    return MemoryCounterStore()
