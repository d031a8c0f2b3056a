"""
Circuit Breaker Pattern

Fails fast when a backing store is unhealthy so lookups degrade to
"no result" instead of queueing behind a dead connection.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation, requests flow through
    OPEN = "open"  # Backend unhealthy, requests fail fast
    HALF_OPEN = "half_open"  # Testing if backend recovered


class CircuitOpenError(Exception):
    """Circuit breaker is open, rejecting requests."""

    def __init__(self, service: str, retry_after: float | None = None) -> None:
        message = f"Circuit breaker open for {service}"
        if retry_after:
            message += f", retry after {retry_after:.1f}s"
        super().__init__(message)
        self.service = service
        self.retry_after = retry_after


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker behavior."""

    failure_threshold: int = 5  # Failures before opening
    success_threshold: int = 2  # Successes to close from half-open
    recovery_timeout: float = 30.0  # Seconds before trying half-open
    excluded_exceptions: tuple[type[Exception], ...] = ()  # Don't count these as failures


@dataclass
class CircuitStats:
    """Statistics for monitoring circuit breaker state."""

    state: CircuitState = CircuitState.CLOSED
    failure_count: int = 0
    success_count: int = 0
    last_failure_time: float | None = None
    total_calls: int = 0
    total_failures: int = 0
    total_successes: int = 0


class CircuitBreaker:
    """
    Circuit breaker implementation with configurable thresholds.

    States:
    - CLOSED: Normal operation. Requests pass through.
              After failure_threshold failures, transitions to OPEN.
    - OPEN: Failing fast. All requests raise CircuitOpenError.
            After recovery_timeout, transitions to HALF_OPEN.
    - HALF_OPEN: Testing recovery. Requests allowed through.
                 success_threshold successes → CLOSED, any failure → OPEN.

    Example:
        breaker = CircuitBreaker(failure_threshold=3, recovery_timeout=10.0, name="judges")

        try:
            rows = await breaker.call(store.sample, 100)
        except CircuitOpenError:
            rows = []
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        success_threshold: int = 2,
        recovery_timeout: float = 30.0,
        excluded_exceptions: tuple[type[Exception], ...] = (),
        name: str = "default",
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize circuit breaker.

        Args:
            failure_threshold: Number of failures before opening circuit
            success_threshold: Successes needed to close from half-open
            recovery_timeout: Seconds to wait before trying half-open
            excluded_exceptions: Exception types that don't count as failures
            name: Name for logging
            clock: Monotonic time source (injectable for tests)
        """
        self._config = CircuitBreakerConfig(
            failure_threshold=failure_threshold,
            success_threshold=success_threshold,
            recovery_timeout=recovery_timeout,
            excluded_exceptions=excluded_exceptions,
        )
        self._name = name
        self._clock = clock
        self._lock = asyncio.Lock()

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time: float | None = None

        self._total_calls = 0
        self._total_failures = 0
        self._total_successes = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> CircuitState:
        """Current circuit state."""
        return self._state

    @property
    def stats(self) -> CircuitStats:
        """Get current statistics."""
        return CircuitStats(
            state=self._state,
            failure_count=self._failure_count,
            success_count=self._success_count,
            last_failure_time=self._last_failure_time,
            total_calls=self._total_calls,
            total_failures=self._total_failures,
            total_successes=self._total_successes,
        )

    async def call(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """
        Execute function through circuit breaker.

        Raises:
            CircuitOpenError: If circuit is open
            Exception: Any exception from the wrapped function
        """
        async with self._lock:
            self._check_state()

        self._total_calls += 1

        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            if isinstance(e, self._config.excluded_exceptions):
                raise
            await self._on_failure(e)
            raise

        await self._on_success()
        return result

    def _check_state(self) -> None:
        """Check if request should be allowed through."""
        if self._state != CircuitState.OPEN:
            return

        if self._last_failure_time is not None:
            elapsed = self._clock() - self._last_failure_time
            if elapsed >= self._config.recovery_timeout:
                logger.info(
                    f"Circuit breaker '{self._name}' transitioning to HALF_OPEN "
                    f"after {elapsed:.1f}s recovery timeout"
                )
                self._state = CircuitState.HALF_OPEN
                self._success_count = 0
                return
            retry_after = self._config.recovery_timeout - elapsed
        else:
            retry_after = None

        raise CircuitOpenError(self._name, retry_after=retry_after)

    async def _on_success(self) -> None:
        async with self._lock:
            self._total_successes += 1

            if self._state == CircuitState.HALF_OPEN:
                self._success_count += 1
                if self._success_count >= self._config.success_threshold:
                    logger.info(
                        f"Circuit breaker '{self._name}' closing after "
                        f"{self._success_count} successful calls"
                    )
                    self._state = CircuitState.CLOSED
                    self._failure_count = 0
                    self._success_count = 0
            elif self._state == CircuitState.CLOSED:
                self._failure_count = 0

    async def _on_failure(self, error: Exception) -> None:
        async with self._lock:
            self._total_failures += 1
            self._failure_count += 1
            self._last_failure_time = self._clock()

            logger.warning(
                f"Circuit breaker '{self._name}' recorded failure "
                f"({self._failure_count}/{self._config.failure_threshold}): {error!r}"
            )

            if self._state == CircuitState.HALF_OPEN:
                logger.info(
                    f"Circuit breaker '{self._name}' opening after failure in HALF_OPEN state"
                )
                self._state = CircuitState.OPEN
            elif (
                self._state == CircuitState.CLOSED
                and self._failure_count >= self._config.failure_threshold
            ):
                logger.warning(
                    f"Circuit breaker '{self._name}' opening after "
                    f"{self._failure_count} consecutive failures"
                )
                self._state = CircuitState.OPEN

    def reset(self) -> None:
        """Manually reset circuit to closed state."""
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time = None
        logger.info(f"Circuit breaker '{self._name}' manually reset to CLOSED")
