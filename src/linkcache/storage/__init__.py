from __future__ import annotations

from linkcache.utils.config import LinkCacheConfig
from linkcache.utils.resilience import CircuitBreaker, CircuitBreakerConfig

from .base import InMemoryLinkStore, LinkStore
from .redis_adapter import RedisLinkStore
from .resilient import ResilientLinkStore


def create_store(config: LinkCacheConfig) -> LinkStore:
    """Build the configured store, wrapped for resilience when enabled."""
    storage = config.storage
    if storage.type == "memory":
        store: LinkStore = InMemoryLinkStore()
    elif storage.type == "redis":
        store = RedisLinkStore(storage.connection_string or "redis://localhost:6379/0", prefix=storage.prefix)
    else:
        raise ValueError(f"unknown storage type: {storage.type!r}")

    resilience = config.resilience
    if not resilience.circuit_breaker_enabled:
        return store
    breaker = CircuitBreaker(
        CircuitBreakerConfig(
            failure_threshold=resilience.failure_threshold,
            reset_timeout_seconds=resilience.reset_timeout_seconds,
        ),
        name=f"{storage.type} store",
    )
    return ResilientLinkStore(
        store,
        circuit_breaker=breaker,
        retry_attempts=resilience.retry_max_attempts,
        retry_backoff_ms=resilience.retry_backoff_ms,
    )


__all__ = ["LinkStore", "InMemoryLinkStore", "RedisLinkStore", "ResilientLinkStore", "create_store"]
