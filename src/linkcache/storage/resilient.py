from __future__ import annotations

import typing as t

from linkcache.core.models import LinkRecord
from linkcache.utils.resilience import CircuitBreaker, CircuitBreakerConfig, RetryPolicy, with_retries

from .base import LinkStore


class ResilientLinkStore(LinkStore):
    """Decorates a store with a circuit breaker and bounded retries.

    Retrying is a store-client concern; the coordinator calls through this
    wrapper exactly once per operation and never retries on its own.
    """

    def __init__(
        self,
        inner: LinkStore,
        circuit_breaker: t.Optional[CircuitBreaker] = None,
        retry_attempts: int = 3,
        retry_backoff_ms: t.Optional[t.List[int]] = None,
    ) -> None:
        self._inner = inner
        self._breaker = circuit_breaker or CircuitBreaker(CircuitBreakerConfig())
        self._retry = RetryPolicy(attempts=retry_attempts, backoff_ms=list(retry_backoff_ms or [100, 500, 2000]))

    @property
    def inner(self) -> LinkStore:
        return self._inner

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def _call(self, operation: str, op: t.Callable[[], t.Awaitable[t.Any]]) -> t.Any:
        return await self._breaker.run(lambda: with_retries(op, self._retry, operation=operation))

    async def get(self, key: str) -> t.Optional[LinkRecord]:
        return await self._call("get", lambda: self._inner.get(key))

    async def put(self, record: LinkRecord) -> None:
        await self._call("put", lambda: self._inner.put(record))

    async def delete(self, key: str) -> bool:
        return await self._call("delete", lambda: self._inner.delete(key))

    async def increment_counter(self, key: str) -> int:
        # not retried: a retry after an ambiguous failure could double count
        return await self._breaker.run(lambda: self._inner.increment_counter(key))

    async def find_by_value(self, value: str) -> t.Optional[LinkRecord]:
        return await self._call("find_by_value", lambda: self._inner.find_by_value(value))

    async def scan(self) -> t.AsyncIterator[LinkRecord]:
        async for record in self._inner.scan():
            yield record

    async def is_healthy(self) -> bool:
        return await self._inner.is_healthy()

    async def close(self) -> None:
        await self._inner.close()
