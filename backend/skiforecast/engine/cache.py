"""
Time-to-live cache for fetched forecasts.

Owned by the caller and injected into the fetch layer. Entries expire after
their TTL and are evicted when read; there is no size bound.
"""

import time
from typing import Any, Callable, Optional

from skiforecast.config import CACHE_TTL_SECONDS


class ForecastCache:
    """In-memory TTL cache keyed by string."""

    def __init__(
        self,
        ttl: float = CACHE_TTL_SECONDS,
        time_func: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._time_func = time_func
        self._storage: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any:
        item = self._storage.get(key)
        if item is None:
            return None
        expires_at, value = item
        if expires_at <= self._time_func():
            self._storage.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        lifetime = self.ttl if ttl is None else ttl
        self._storage[key] = (self._time_func() + lifetime, value)

    def clear(self) -> None:
        self._storage.clear()

    def __len__(self) -> int:
        return len(self._storage)


def cache_key(lat: float, lon: float) -> str:
    return f"{lat},{lon}"
