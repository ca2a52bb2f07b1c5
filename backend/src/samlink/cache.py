"""In-process caching for registry search results.

Caches are explicitly constructed and injected so tests can control the
clock and isolate state. Entries expire lazily: an expired entry is dropped
on its next lookup or on the next write, there is no background sweeper.
"""

import asyncio
import time
from typing import Any, Callable

from .logging import get_context_logger

logger = get_context_logger(__name__)

Clock = Callable[[], float]

# Cache key prefixes
KEY_PREFIX = "samlink:"


class CacheBackend:
    """Abstract cache backend interface."""

    async def get(self, key: str) -> Any | None:
        """Get value from cache."""
        raise NotImplementedError

    async def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """Set value in cache."""
        raise NotImplementedError

    async def delete(self, key: str) -> bool:
        """Delete value from cache."""
        raise NotImplementedError

    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        raise NotImplementedError

    async def clear(self) -> int:
        """Drop every entry."""
        raise NotImplementedError


class InMemoryCache(CacheBackend):
    """Dictionary-backed TTL cache.

    Args:
        default_ttl: TTL in seconds used when `set` is called without one
            (None means entries never expire)
        clock: Monotonic time source, injectable for tests
    """

    def __init__(self, default_ttl: float | None = None, clock: Clock = time.monotonic):
        self._cache: dict[str, tuple[Any, float | None]] = {}
        self._lock = asyncio.Lock()
        self.default_ttl = default_ttl
        self._clock = clock

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            if key not in self._cache:
                return None

            value, expires_at = self._cache[key]
            if expires_at is not None and self._clock() >= expires_at:
                del self._cache[key]
                return None

            return value

    async def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        ttl = self.default_ttl if ttl is None else ttl
        async with self._lock:
            now = self._clock()
            self._prune(now)
            self._cache[key] = (value, now + ttl if ttl is not None else None)
            return True

    def _prune(self, now: float) -> None:
        """Drop expired entries. Called with the lock held."""
        expired = [
            k for k, (_, expires_at) in self._cache.items()
            if expires_at is not None and now >= expires_at
        ]
        for k in expired:
            del self._cache[k]

    async def delete(self, key: str) -> bool:
        async with self._lock:
            if key in self._cache:
                del self._cache[key]
                return True
            return False

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def clear(self) -> int:
        async with self._lock:
            count = len(self._cache)
            self._cache.clear()
            return count

    def __len__(self) -> int:
        return len(self._cache)


# =========================
# Cache Key Builders
# =========================


def search_key(
    normalized_name: str,
    state: str | None = None,
    domain: str | None = None,
) -> str:
    """Build cache key for registry search results."""
    state_part = (state or "").strip().upper()
    domain_part = (domain or "").strip().lower()
    return f"{KEY_PREFIX}search:{normalized_name}|{state_part}|{domain_part}"
