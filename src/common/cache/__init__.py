"""
Caching Module

Provides Redis-based caching with fallback to in-memory cache.
"""

from src.common.cache.redis_cache import (
    CacheConfig,
    CacheStats,
    MemoryCache,
    RedisCache,
    hash_key,
)

__all__ = ["RedisCache", "CacheConfig", "CacheStats", "MemoryCache", "hash_key"]
