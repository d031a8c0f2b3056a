"""
Resilient record store wrapper.

Every call runs as: circuit breaker -> retry with backoff -> per-attempt
timeout -> wrapped store. Whatever goes wrong on the way out surfaces as
BackendUnavailableError, so engines only handle one transport failure type.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from src.common.resilience import (
    CircuitBreaker,
    CircuitOpenError,
    RetryConfig,
    retry_with_backoff,
    with_timeout,
)
from src.judgefinder.errors import (
    BackendUnavailableError,
    InternalError,
    InvalidInputError,
    RecordMappingError,
)
from src.judgefinder.store.protocols import RecordStore, Row

logger = logging.getLogger(__name__)


class ResilientRecordStore:
    """RecordStore decorator adding timeouts, retries and a circuit breaker."""

    def __init__(
        self,
        inner: RecordStore,
        breaker: CircuitBreaker | None = None,
        retry_config: RetryConfig | None = None,
        timeout_seconds: float | None = 5.0,
        name: str = "records",
    ):
        self._inner = inner
        self._name = name
        self._timeout = timeout_seconds
        self._breaker = breaker or CircuitBreaker(
            name=name,
            # Bad arguments are not a sign of an unhealthy backend
            excluded_exceptions=(InvalidInputError, InternalError, RecordMappingError),
        )
        self._retry_config = retry_config or RetryConfig(
            max_attempts=2,
            retryable_exceptions=(BackendUnavailableError, TimeoutError, OSError),
        )

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def _call(
        self,
        operation: str,
        func: Callable[..., Awaitable[list[Row]]],
        *args: Any,
    ) -> list[Row]:
        async def attempt() -> list[Row]:
            return await with_timeout(func(*args), self._timeout)

        async def guarded() -> list[Row]:
            return await retry_with_backoff(attempt, config=self._retry_config)

        try:
            return await self._breaker.call(guarded)
        except CircuitOpenError as e:
            raise BackendUnavailableError(f"{self._name}.{operation}", str(e)) from e
        except TimeoutError as e:
            raise BackendUnavailableError(f"{self._name}.{operation}", "timed out") from e
        except OSError as e:
            raise BackendUnavailableError(f"{self._name}.{operation}", str(e)) from e

    async def find_by_exact_field(self, field: str, value: str) -> list[Row]:
        return await self._call("find_by_exact_field", self._inner.find_by_exact_field, field, value)

    async def find_by_substring(self, field: str, value: str, limit: int) -> list[Row]:
        return await self._call(
            "find_by_substring", self._inner.find_by_substring, field, value, limit
        )

    async def find_by_any_sequence(
        self,
        field: str,
        sequences: Sequence[Sequence[str]],
        limit: int,
    ) -> list[Row]:
        return await self._call(
            "find_by_any_sequence", self._inner.find_by_any_sequence, field, sequences, limit
        )

    async def sample(self, limit: int) -> list[Row]:
        return await self._call("sample", self._inner.sample, limit)

    async def ranged_fetch(
        self,
        offset: int,
        limit: int,
        order_by: str,
        descending: bool = False,
    ) -> list[Row]:
        return await self._call(
            "ranged_fetch", self._inner.ranged_fetch, offset, limit, order_by, descending
        )
