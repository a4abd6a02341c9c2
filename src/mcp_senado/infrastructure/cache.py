"""
In-memory LRU cache with per-entry TTL for Senate API responses.
"""

import asyncio
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class CacheStats(BaseModel):
    hits: int = 0
    misses: int = 0
    size: int = 0
    hit_rate: float = 0.0


def generate_cache_key(prefix: str, params: Optional[Dict[str, Any]] = None) -> str:
    """
    Build a deterministic cache key from a prefix and parameters.

    Keys are sorted so argument order does not matter, values are JSON encoded.

    Example:
        >>> generate_cache_key("senador_detalhes", {"codigo": 5012})
        'senador_detalhes:codigo=5012'
    """
    params = params or {}
    parts = [
        f"{key}={json.dumps(params[key], sort_keys=True, ensure_ascii=False, default=str)}"
        for key in sorted(params)
    ]
    return f"{prefix}:{'&'.join(parts)}"


class LRUCache:
    """
    Least-recently-used cache with time-based expiry.

    Args:
        max_size: Maximum number of entries kept
        ttl: Default entry lifetime in milliseconds
        clock: Monotonic clock in seconds, injectable for tests
    """

    def __init__(self, max_size: int, ttl: int, clock: Callable[[], float] = time.monotonic):
        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[Any, float]]" = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._cleanup_task: Optional[asyncio.Task] = None

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            self._misses += 1
            return None

        self._entries.move_to_end(key)
        self._hits += 1
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Cache eviction", extra={"cache_key": evicted})

        lifetime_ms = self.ttl if ttl is None else ttl
        self._entries[key] = (value, self._clock() + lifetime_ms / 1000)

    def has(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if self._clock() >= entry[1]:
            del self._entries[key]
            return False
        return True

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def cleanup(self) -> int:
        """Remove expired entries and return how many were dropped."""
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Cache cleanup removed {len(expired)} expired entries")
        return len(expired)

    def get_stats(self) -> CacheStats:
        total = self._hits + self._misses
        return CacheStats(
            hits=self._hits,
            misses=self._misses,
            size=len(self._entries),
            hit_rate=self._hits / total if total else 0.0,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def start_cleanup(self, interval: int) -> None:
        """Start the periodic expiry sweep. Must be called from a running loop."""
        if self._cleanup_task is not None and not self._cleanup_task.done():
            return
        self._cleanup_task = asyncio.get_running_loop().create_task(self._cleanup_loop(interval))

    async def stop_cleanup(self) -> None:
        if self._cleanup_task is None:
            return
        self._cleanup_task.cancel()
        try:
            await self._cleanup_task
        except asyncio.CancelledError:
            pass
        self._cleanup_task = None

    async def _cleanup_loop(self, interval: int) -> None:
        while True:
            await asyncio.sleep(interval / 1000)
            self.cleanup()


class NoOpCache:
    """Cache used when caching is disabled. Never stores anything."""

    max_size = 0
    ttl = 0

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        return None

    def has(self, key: str) -> bool:
        return False

    def delete(self, key: str) -> bool:
        return False

    def clear(self) -> None:
        return None

    def cleanup(self) -> int:
        return 0

    def get_stats(self) -> CacheStats:
        return CacheStats()

    def __len__(self) -> int:
        return 0

    def start_cleanup(self, interval: int) -> None:
        return None

    async def stop_cleanup(self) -> None:
        return None


def create_cache(cache_config) -> Any:
    """Build the cache described by a ``CacheConfig``."""
    if not cache_config.enabled:
        logger.info("Response cache disabled")
        return NoOpCache()
    return LRUCache(max_size=cache_config.max_size, ttl=cache_config.ttl)
