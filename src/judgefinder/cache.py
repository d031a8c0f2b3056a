"""
Lookup cache facade.

Wraps a key/value cache (RedisCache or MemoryCache) with the judgefinder key
scheme and (de)serialisation. The cache is an optimisation only: failures,
timeouts and undecodable payloads count as misses on read and are ignored on
write.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from src.common.cache import hash_key
from src.common.resilience import with_timeout
from src.judgefinder.errors import JudgeFinderError
from src.judgefinder.models import ResolutionResult, SearchResponse, SearchResultKind

logger = logging.getLogger(__name__)

_DECODE_ERRORS = (JudgeFinderError, AttributeError, KeyError, TypeError, ValueError)


@runtime_checkable
class CacheStore(Protocol):
    """Minimal async key/value store with per-entry TTL."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> Any: ...


def resolution_key(identifier: str) -> str:
    return f"judge_lookup:{identifier}"


def search_key(query: str, limit: int, kinds: Iterable[SearchResultKind]) -> str:
    """Key for a search response; type order does not matter."""
    type_part = ",".join(sorted(kind.value for kind in kinds))
    return f"judge_search:{hash_key(query.casefold(), str(limit), type_part)}"


class LookupCache:
    """Typed, failure-tolerant view over a CacheStore."""

    def __init__(self, store: CacheStore, timeout_seconds: float | None = 1.0):
        self._store = store
        self._timeout = timeout_seconds

    async def _get(self, key: str) -> Any | None:
        try:
            return await with_timeout(self._store.get(key), self._timeout)
        except Exception as e:
            logger.warning(f"Cache get failed for {key}: {e!r}")
            return None

    async def _set(self, key: str, value: Any, ttl: int) -> None:
        if ttl <= 0:
            return
        try:
            await with_timeout(self._store.set(key, value, ttl=ttl), self._timeout)
        except Exception as e:
            logger.warning(f"Cache set failed for {key}: {e!r}")

    async def get_resolution(self, identifier: str) -> ResolutionResult | None:
        key = resolution_key(identifier)
        payload = await self._get(key)
        if payload is None:
            return None
        try:
            return ResolutionResult.from_dict(payload)
        except _DECODE_ERRORS as e:
            logger.warning(f"Discarding undecodable cache entry {key}: {e!r}")
            return None

    async def put_resolution(self, identifier: str, result: ResolutionResult, ttl: int) -> None:
        await self._set(resolution_key(identifier), result.to_dict(), ttl)

    async def get_search(self, key: str) -> SearchResponse | None:
        payload = await self._get(key)
        if payload is None:
            return None
        try:
            return SearchResponse.from_dict(payload)
        except _DECODE_ERRORS as e:
            logger.warning(f"Discarding undecodable cache entry {key}: {e!r}")
            return None

    async def put_search(self, key: str, response: SearchResponse, ttl: int) -> None:
        await self._set(key, response.to_dict(), ttl)
