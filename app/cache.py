"""
In-process caching utilities for slow-changing external data
Entries expire against an injectable clock so staleness is testable
"""
import logging
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class Cache:
    """Process-wide key/value cache with per-entry TTL"""

    def __init__(self, clock: Clock = time.monotonic):
        self.clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache, or None when missing or expired"""
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"❌ Cache MISS: {key}")
            return None

        expires_at, value = entry
        if self.clock() >= expires_at:
            logger.debug(f"⌛ Cache EXPIRED: {key}")
            self._entries.pop(key, None)
            return None

        logger.debug(f"✅ Cache HIT: {key}")
        return value

    def set(self, key: str, value: Any, ttl: float = 3600) -> None:
        """Set value in cache with TTL in seconds (default 1 hour)"""
        self._entries[key] = (self.clock() + ttl, value)
        logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")

    def delete(self, key: str) -> bool:
        """Delete value from cache"""
        existed = self._entries.pop(key, None) is not None
        if existed:
            logger.debug(f"✅ Cache DELETE: {key}")
        return existed


# Global cache instance
cache = Cache()
