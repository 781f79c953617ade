"""
In-memory TTL cache for profile lookups.

Every stored message needs the author's display name (and, in groups, the
group name). Those come from the messaging platform's profile endpoints,
which are rate limited per channel, so resolved names are kept for a few
minutes.

All access happens on the event loop; an asyncio.Lock guards the
get-or-compute path so a burst of messages from one user triggers one
profile request.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger("Cache")


@dataclass
class CacheEntry:
    """Single cache entry with value and expiration time."""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class CacheManager:
    """Async-safe in-memory cache with TTL support."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._cache: Dict[str, CacheEntry] = {}
        self._clock = clock
        self._async_lock: Optional[asyncio.Lock] = None
        self._stats = {"hits": 0, "misses": 0, "invalidations": 0}

    def _get_async_lock(self) -> asyncio.Lock:
        if self._async_lock is None:
            self._async_lock = asyncio.Lock()
        return self._async_lock

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        entry = self._cache.get(key)
        if entry is None:
            self._stats["misses"] += 1
            return None
        if entry.is_expired(self._clock()):
            del self._cache[key]
            self._stats["misses"] += 1
            logger.debug(f"Cache expired: {key}")
            return None
        self._stats["hits"] += 1
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float = 300):
        """Store value in cache with TTL."""
        self._cache[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)

    def invalidate(self, key: str) -> bool:
        """Remove a specific key. Returns True if it existed."""
        if self._cache.pop(key, None) is not None:
            self._stats["invalidations"] += 1
            return True
        return False

    def clear(self):
        count = len(self._cache)
        self._cache.clear()
        logger.info(f"Cache cleared: {count} entries removed")

    def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns the number removed."""
        now = self._clock()
        expired_keys = [key for key, entry in self._cache.items() if entry.is_expired(now)]
        for key in expired_keys:
            del self._cache[key]
        if expired_keys:
            logger.debug(f"Cache cleanup: {len(expired_keys)} expired entries removed")
        return len(expired_keys)

    async def get_or_set_async(
        self, key: str, factory: Callable[[], Awaitable[Any]], ttl_seconds: float = 300
    ) -> Any:
        """
        Get value from cache or compute it with an async factory.

        Exceptions from the factory propagate and nothing is cached.
        """
        async with self._get_async_lock():
            cached = self.get(key)
            if cached is not None:
                return cached
            value = await factory()
            self.set(key, value, ttl_seconds)
            return value

    def get_stats(self) -> Dict[str, Any]:
        total = self._stats["hits"] + self._stats["misses"]
        hit_rate = (self._stats["hits"] / total * 100) if total > 0 else 0
        return {**self._stats, "total_requests": total, "hit_rate": round(hit_rate, 2), "size": len(self._cache)}

    def log_stats(self):
        stats = self.get_stats()
        logger.info(
            f"📊 Cache stats: {stats['size']} entries, {stats['hit_rate']}% hit rate "
            f"({stats['hits']} hits / {stats['misses']} misses)"
        )


# Global cache instance
_cache_manager: Optional[CacheManager] = None


def get_cache() -> CacheManager:
    """Get the global cache manager instance."""
    global _cache_manager
    if _cache_manager is None:
        _cache_manager = CacheManager()
    return _cache_manager


def user_profile_key(user_id: str) -> str:
    return f"profile:user:{user_id}"


def group_member_key(group_id: str, user_id: str) -> str:
    return f"profile:group:{group_id}:member:{user_id}"


def group_name_key(group_id: str) -> str:
    return f"profile:group:{group_id}:name"
