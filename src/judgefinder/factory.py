"""
Service wiring.

Builds the resolver and search engine from a JudgeFinderConfig: PostgreSQL
pool, resilient store wrappers, cache backend and metrics sink.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from src.common.cache import CacheConfig, MemoryCache, RedisCache
from src.common.resilience import CircuitBreaker, RetryConfig
from src.judgefinder.cache import CacheStore, LookupCache
from src.judgefinder.config import JudgeFinderConfig
from src.judgefinder.errors import (
    BackendUnavailableError,
    InternalError,
    InvalidInputError,
    RecordMappingError,
)
from src.judgefinder.observability import MetricsSink, create_metrics_sink
from src.judgefinder.resolution import JudgeResolver, ResolverSettings
from src.judgefinder.search import SearchEngine, SearchSettings
from src.judgefinder.store import (
    PostgresRecordStore,
    RecordStore,
    ResilientRecordStore,
    create_db_pool,
)

logger = logging.getLogger(__name__)


def wrap_store(inner: RecordStore, config: JudgeFinderConfig, name: str) -> ResilientRecordStore:
    """Put a store behind timeout, retry and a circuit breaker sized from config."""
    breaker = CircuitBreaker(
        failure_threshold=config.circuit_failure_threshold,
        recovery_timeout=config.circuit_recovery_seconds,
        excluded_exceptions=(InvalidInputError, InternalError, RecordMappingError),
        name=name,
    )
    retry = RetryConfig(
        max_attempts=config.retry_max_attempts,
        retryable_exceptions=(BackendUnavailableError, TimeoutError, OSError),
    )
    return ResilientRecordStore(
        inner,
        breaker=breaker,
        retry_config=retry,
        timeout_seconds=config.store_timeout_seconds,
        name=name,
    )


async def build_cache_backend(config: JudgeFinderConfig) -> CacheStore:
    """RedisCache when enabled (it falls back to memory on its own), else MemoryCache."""
    if config.redis_enabled:
        cache = RedisCache(
            CacheConfig(
                redis_url=config.redis_url,
                default_ttl_seconds=config.medium_ttl_seconds,
                key_prefix=config.cache_key_prefix,
                socket_timeout=config.cache_timeout_seconds,
                memory_cache_max_size=config.memory_cache_max_size,
            )
        )
        await cache.connect()
        return cache
    return MemoryCache(
        max_size=config.memory_cache_max_size,
        default_ttl=config.medium_ttl_seconds,
    )


def build_engines(
    judges: RecordStore,
    courts: RecordStore,
    config: JudgeFinderConfig,
    cache_backend: CacheStore | None = None,
    metrics: MetricsSink | None = None,
) -> tuple[JudgeResolver, SearchEngine]:
    """Engines over already-built stores. Used directly by tests and local runs."""
    lookup_cache = (
        LookupCache(cache_backend, timeout_seconds=config.cache_timeout_seconds)
        if cache_backend is not None
        else None
    )
    resolver = JudgeResolver(
        judges,
        cache=lookup_cache,
        metrics=metrics or create_metrics_sink(config.metrics_sink),
        settings=ResolverSettings.from_config(config),
    )
    search = SearchEngine(
        judges,
        courts,
        cache=lookup_cache,
        settings=SearchSettings.from_config(config),
    )
    return resolver, search


@dataclass
class JudgeFinderServices:
    """Everything a caller needs, plus the resources to release afterwards."""

    resolver: JudgeResolver
    search: SearchEngine
    pool: Any = None
    cache_backend: Any = None
    _closed: bool = field(default=False, repr=False)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if isinstance(self.cache_backend, RedisCache):
            await self.cache_backend.close()
        if self.pool is not None:
            await self.pool.close()
            logger.info("Database pool closed")


async def build_services(config: JudgeFinderConfig) -> JudgeFinderServices:
    """
    Connect to PostgreSQL (and Redis if enabled) and build both engines.

    Raises:
        BackendUnavailableError: PostgreSQL is unreachable.
    """
    pool = await create_db_pool(
        config.postgres_url,
        min_size=config.postgres_pool_min,
        max_size=config.postgres_pool_max,
    )
    judges = wrap_store(PostgresRecordStore.judges(pool), config, "judges")
    courts = wrap_store(PostgresRecordStore.courts(pool), config, "courts")
    cache_backend = await build_cache_backend(config)
    resolver, search = build_engines(judges, courts, config, cache_backend)
    return JudgeFinderServices(
        resolver=resolver,
        search=search,
        pool=pool,
        cache_backend=cache_backend,
    )
