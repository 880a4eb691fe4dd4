import time
from typing import Callable, List

from cachetools import TTLCache


class SlidingWindowRateLimiter:
    """
    Allow at most `limit` hits per key within a sliding window of `window_seconds`.
    Keys idle for a full window are evicted by the TTL cache.
    """

    def __init__(self, limit: int = 10, window_seconds: float = 60.0,
                 maxsize: int = 10_000, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: TTLCache = TTLCache(maxsize=maxsize, ttl=window_seconds, timer=clock)

    def allow(self, key: str) -> bool:
        now = self.clock()
        hits: List[float] = [t for t in self._hits.get(key, []) if now - t < self.window_seconds]
        if len(hits) >= self.limit:
            self._hits[key] = hits
            return False
        hits.append(now)
        self._hits[key] = hits
        return True
