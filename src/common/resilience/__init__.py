"""
Resilience Patterns

Circuit breaker, retry with backoff, and timeout utilities
for building fault-tolerant services.
"""

from src.common.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitOpenError,
    CircuitState,
    CircuitStats,
)
from src.common.resilience.retry import RetryConfig, retry_with_backoff
from src.common.resilience.timeout import with_timeout

__all__ = [
    "CircuitBreaker",
    "CircuitOpenError",
    "CircuitState",
    "CircuitStats",
    "retry_with_backoff",
    "RetryConfig",
    "with_timeout",
]
