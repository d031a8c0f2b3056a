"""
Redis Cache Implementation

Provides distributed caching with Redis, with fallback to in-memory cache.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import redis.asyncio as redis

from src.common.telemetry import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


@dataclass
class CacheConfig:
    """Configuration for Redis cache."""

    redis_url: str = "redis://localhost:6379/0"
    default_ttl_seconds: int = 900
    key_prefix: str = "judgefinder:"
    max_connections: int = 10
    socket_timeout: float = 1.0
    # Fallback in-memory cache settings
    memory_cache_max_size: int = 1000
    memory_cache_ttl_seconds: int = 300


@dataclass
class CacheStats:
    """Statistics for cache operations."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    errors: int = 0

    @property
    def hit_rate(self) -> float:
        """Get cache hit rate."""
        total = self.hits + self.misses
        return (self.hits / total) if total > 0 else 0.0


class MemoryCache:
    """
    Simple in-memory LRU cache with TTL support.

    Used as fallback when Redis is unavailable, and directly in tests and
    local runs. ``clock`` returns seconds and can be swapped for a fake.
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: int = 300,
        clock: Callable[[], float] = time.time,
    ):
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._clock = clock
        self._cache: OrderedDict[str, tuple[Any, float]] = OrderedDict()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._cache)

    async def get(self, key: str) -> Any | None:
        """Get value from cache."""
        async with self._lock:
            if key not in self._cache:
                return None

            value, expiry = self._cache[key]
            if self._clock() >= expiry:
                del self._cache[key]
                return None

            # Move to end (LRU)
            self._cache.move_to_end(key)
            return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Set value in cache, overwriting any existing entry."""
        async with self._lock:
            ttl = ttl or self._default_ttl
            expiry = self._clock() + ttl

            if key in self._cache:
                self._cache.move_to_end(key)
            else:
                # Remove oldest if at capacity
                while len(self._cache) >= self._max_size:
                    self._cache.popitem(last=False)

            self._cache[key] = (value, expiry)


class RedisCache:
    """
    Redis-based cache with automatic fallback to in-memory cache.

    Features:
    - Async Redis operations
    - Automatic JSON serialization
    - Configurable TTL
    - In-memory fallback when Redis unavailable
    - Stats tracking
    """

    def __init__(self, config: CacheConfig | None = None, client: Any = None):
        """
        Initialize Redis cache.

        Args:
            config: Cache configuration
            client: Pre-built redis.asyncio client (skips connect())
        """
        self._config = config or CacheConfig()
        self._redis: Any = client
        self._connected = client is not None
        self._memory_cache = MemoryCache(
            max_size=self._config.memory_cache_max_size,
            default_ttl=self._config.memory_cache_ttl_seconds,
        )
        self._stats = CacheStats()

    @property
    def stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats

    @property
    def is_connected(self) -> bool:
        """Check if Redis is connected."""
        return self._connected

    async def connect(self) -> bool:
        """
        Connect to Redis server.

        Returns:
            True if connected successfully, False otherwise
        """
        try:
            self._redis = redis.from_url(
                self._config.redis_url,
                max_connections=self._config.max_connections,
                socket_timeout=self._config.socket_timeout,
                decode_responses=True,
            )
            await self._redis.ping()
            self._connected = True
            logger.info("Connected to Redis")
            return True
        except (redis.RedisError, OSError) as e:
            logger.warning(f"Failed to connect to Redis: {e}. Using memory cache.")
            self._connected = False
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._connected = False

    def _make_key(self, key: str) -> str:
        """Create prefixed cache key."""
        return f"{self._config.key_prefix}{key}"

    async def get(self, key: str) -> Any | None:
        """
        Get value from cache.

        Returns:
            Cached value or None if not found
        """
        with tracer.start_as_current_span("cache.get") as span:
            full_key = self._make_key(key)
            span.set_attribute("cache.key", key[:50])

            if self._connected:
                try:
                    value = await self._redis.get(full_key)
                    span.set_attribute("cache.source", "redis")
                    if value is not None:
                        self._stats.hits += 1
                        span.set_attribute("cache.hit", True)
                        return json.loads(value)
                    self._stats.misses += 1
                    span.set_attribute("cache.hit", False)
                    return None
                except (redis.RedisError, OSError, ValueError) as e:
                    self._stats.errors += 1
                    span.set_attribute("cache.error", str(e))
                    logger.warning(f"Redis get error: {e}")
                    # Fall through to memory cache

            value = await self._memory_cache.get(full_key)
            if value is not None:
                self._stats.hits += 1
                span.set_attribute("cache.hit", True)
            else:
                self._stats.misses += 1
                span.set_attribute("cache.hit", False)
            span.set_attribute("cache.source", "memory")
            return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: Value to cache (must be JSON serializable)
            ttl: Time-to-live in seconds (default from config)

        Returns:
            True if set successfully
        """
        with tracer.start_as_current_span("cache.set") as span:
            full_key = self._make_key(key)
            ttl = ttl or self._config.default_ttl_seconds
            span.set_attribute("cache.key", key[:50])
            span.set_attribute("cache.ttl", ttl)

            if self._connected:
                try:
                    await self._redis.setex(full_key, ttl, json.dumps(value))
                    self._stats.sets += 1
                    span.set_attribute("cache.source", "redis")
                    return True
                except (redis.RedisError, OSError, TypeError) as e:
                    self._stats.errors += 1
                    span.set_attribute("cache.error", str(e))
                    logger.warning(f"Redis set error: {e}")

            await self._memory_cache.set(full_key, value, ttl)
            self._stats.sets += 1
            span.set_attribute("cache.source", "memory")
            return True


def hash_key(*parts: str) -> str:
    """Short stable digest of the given key parts."""
    return hashlib.sha256("\x1f".join(parts).encode()).hexdigest()[:16]
