"""Utility module for configuration and resilience patterns."""

from .config import LinkCacheConfig
from .resilience import CircuitBreaker, CircuitBreakerConfig, CircuitState, RetryPolicy, with_retries

__all__ = [
    "LinkCacheConfig",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    "RetryPolicy",
    "with_retries",
]
