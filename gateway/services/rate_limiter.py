#  StyleMirror Gateway - Rate Limiter
#
#  Fixed-window request limiter over a CounterStore.
#  Counter key: "<namespace>:<client>:<window index>", TTL = window length.
#
#  Depends on: services/counter_store.py
#  Used by:    container.py, services/gateway.py

import logging
import time
from dataclasses import dataclass
from typing import Callable

from gateway.services.counter_store import CounterStore

logger = logging.getLogger("gateway.rate_limiter")


@dataclass(frozen=True)
class RoutePolicy:
    requests_per_window: int
    window_seconds: int

    def __post_init__(self):
        if self.requests_per_window <= 0 or self.window_seconds <= 0:
            raise ValueError(
                f"RoutePolicy fields must be positive, got "
                f"({self.requests_per_window}, {self.window_seconds})"
            )


@dataclass(frozen=True)
class RateLimitDecision:
    admitted: bool
    remaining: int
    limit: int


def window_index(now: float, window_seconds: int) -> int:
    """Index of the fixed window containing `now` (unix seconds)."""
    return int(now // window_seconds)


class RateLimiter:
    """Admits up to policy.requests_per_window requests per key per window.

    The read and the write are separate store calls, so concurrent requests
    in the same window can each read the same count and all be admitted.
    The effective count can therefore exceed the limit by the number of
    requests in flight. This is a soft limit. Rejected requests never write.

    Store failures propagate as StoreUnavailableError; the caller decides
    how to fail the request.
    """

    def __init__(self, store: CounterStore, clock: Callable[[], float] = time.time):
        self._store = store
        self._clock = clock

    async def check(self, limiter_key: str, policy: RoutePolicy) -> RateLimitDecision:
        now = self._clock()
        counter_key = f"{limiter_key}:{window_index(now, policy.window_seconds)}"

        raw = await self._store.get(counter_key)
        count = _parse_count(raw, counter_key)

        if count >= policy.requests_per_window:
            return RateLimitDecision(admitted=False, remaining=0, limit=policy.requests_per_window)

        await self._store.put(counter_key, str(count + 1), ttl=policy.window_seconds)
        return RateLimitDecision(
            admitted=True,
            remaining=policy.requests_per_window - count - 1,
            limit=policy.requests_per_window,
        )


def _parse_count(raw: str | None, counter_key: str) -> int:
    if raw is None:
        return 0
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer counter %s=%r", counter_key, raw)
        return 0
