from __future__ import annotations

import asyncio
import logging
import time
import typing as t

from linkcache.cache.expiry_heap import ExpiryScheduler
from linkcache.cache.lru_cache import BoundedCache
from linkcache.monitoring import metrics
from linkcache.monitoring.recorder import EventRecorder
from linkcache.storage import LinkStore, create_store
from linkcache.utils.config import LinkCacheConfig

from .errors import InvariantViolation, StoreUnavailable
from .models import (
    CacheStats,
    DedupRecord,
    ExpiredRecord,
    ExpiryEntry,
    ExpiryKind,
    ExpiryPolicy,
    LinkRecord,
    LookupOutcome,
    LookupResult,
    MissRecord,
    OperationKind,
    OperationRecord,
    RecordCategory,
    ScheduledExpiry,
)
from .sweeper import Sweeper

_logger = logging.getLogger(__name__)

T = t.TypeVar("T")


class Coordinator:
    """Single entry point over the LRU cache, the expiry heap and the link store.

    One asyncio lock guards both in-memory containers. Store calls are made
    outside of it, so a slow store never stalls cache bookkeeping. Every
    store failure surfaces as `StoreUnavailable`; nothing is retried here.
    """

    def __init__(
        self,
        store: LinkStore,
        *,
        capacity: int = 100,
        recorder: t.Optional[EventRecorder] = None,
        sweep_interval_seconds: float = 5.0,
        sweeper_enabled: bool = True,
        dedupe_values: bool = False,
        restore_on_start: bool = True,
        clock: t.Callable[[], float] = time.time,
        owns_store: bool = False,
    ) -> None:
        self._store = store
        self._recorder = recorder or EventRecorder()
        self._cache = BoundedCache(capacity, recorder=self._recorder)
        self._scheduler = ExpiryScheduler(recorder=self._recorder)
        self._lock = asyncio.Lock()
        self._clock = clock
        self._dedupe_values = dedupe_values
        self._restore_on_start = restore_on_start
        self._owns_store = owns_store
        self._sweeper = Sweeper(self, interval_seconds=sweep_interval_seconds) if sweeper_enabled else None
        self._started = False

    @classmethod
    def from_config(cls, config: LinkCacheConfig, store: t.Optional[LinkStore] = None, **kwargs: t.Any) -> "Coordinator":
        owns_store = store is None
        return cls(
            store if store is not None else create_store(config),
            capacity=config.cache.capacity,
            recorder=EventRecorder(
                cache_retention=config.recorder.cache_retention,
                heap_retention=config.recorder.heap_retention,
            ),
            sweep_interval_seconds=config.sweeper.interval_seconds,
            sweeper_enabled=config.sweeper.enabled,
            dedupe_values=config.coordinator.dedupe_values,
            restore_on_start=config.coordinator.restore_on_start,
            owns_store=owns_store,
            **kwargs,
        )

    @property
    def store(self) -> LinkStore:
        return self._store

    @property
    def recorder(self) -> EventRecorder:
        return self._recorder

    @property
    def sweeper(self) -> t.Optional[Sweeper]:
        return self._sweeper

    # Lifecycle

    async def start(self) -> None:
        if self._started:
            return
        if self._restore_on_start:
            restored = await self.restore_schedule()
            _logger.info("Restored %d scheduled expiries from store", restored)
        if self._sweeper is not None:
            self._sweeper.start()
        self._started = True

    async def close(self) -> None:
        if self._sweeper is not None:
            await self._sweeper.stop()
        self._started = False
        if self._owns_store:
            await self._store.close()

    async def __aenter__(self) -> "Coordinator":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: t.Any) -> None:
        await self.close()

    # Request-facing operations

    async def lookup(self, key: str) -> LookupResult:
        start = time.perf_counter()
        async with self._lock:
            cached, hit = self._cache.get(key)
            if not hit:
                self._record(MissRecord, key, start, "Not cached; falling back to store")

        # cached entries are still re-validated, policy state lives in the store
        record = await self._store_call("get", key, lambda: self._store.get(key))
        if record is None:
            async with self._lock:
                self._cache.remove(key)
                self._scheduler.remove(key)
            return self._outcome(key, None, LookupOutcome.NOT_FOUND)

        if record.is_expired(self._clock()):
            await self.expire(key, record.policy.reason())
            return self._outcome(key, None, LookupOutcome.EXPIRED)

        await self._store_call("increment_counter", key, lambda: self._store.increment_counter(key))

        if hit:
            if cached != record.value:
                async with self._lock:
                    self._cache.put(key, record.value)
            return self._outcome(key, record.value, LookupOutcome.CACHE_HIT)

        async with self._lock:
            # the sweeper may have reconciled this key while the store call was in flight
            if record.is_expired(self._clock()):
                expired = True
            else:
                expired = False
                if record.policy.is_time_based and not self._scheduler.contains(key):
                    self._scheduler.insert(key, t.cast(float, record.policy.expires_at))
                self._cache.put(key, record.value)
        if expired:
            await self.expire(key, record.policy.reason())
            return self._outcome(key, None, LookupOutcome.EXPIRED)
        return self._outcome(key, record.value, LookupOutcome.CACHE_MISS_STORE_HIT)

    async def insert(self, key: str, value: str, policy: t.Optional[ExpiryPolicy] = None) -> str:
        """Write a link through to the store and schedule its expiry.

        Returns the key that now serves `value`. This is `key` itself unless
        value de-duplication is enabled and a live, non-expiring link for the
        same target already exists.
        """
        policy = policy or ExpiryPolicy.none()
        start = time.perf_counter()
        if self._dedupe_values and policy.kind == ExpiryKind.NONE:
            existing = await self._store_call("find_by_value", key, lambda: self._store.find_by_value(value))
            if existing is not None and existing.key != key and existing.policy.kind == ExpiryKind.NONE:
                async with self._lock:
                    self._record(DedupRecord, existing.key, start, f"Reused {existing.key} instead of creating {key}")
                return existing.key

        record = LinkRecord(key=key, value=value, policy=policy)
        await self._store_call("put", key, lambda: self._store.put(record))
        async with self._lock:
            # a stale value must not outlive the overwrite; the cache refills lazily
            self._cache.remove(key)
            if policy.is_time_based:
                self._scheduler.insert(key, t.cast(float, policy.expires_at))
            else:
                self._scheduler.remove(key)
        return key

    async def remove(self, key: str) -> bool:
        """Forget a key in memory. The store is left untouched."""
        async with self._lock:
            in_cache = self._cache.remove(key)
            scheduled = self._scheduler.remove(key)
        return in_cache or scheduled

    async def delete(self, key: str) -> bool:
        deleted = await self._store_call("delete", key, lambda: self._store.delete(key))
        removed = await self.remove(key)
        return deleted or removed

    # Reconciliation

    async def expire(self, key: str, reason: str, *, already_unscheduled: bool = False) -> bool:
        """Remove an expired key from the store, the cache and the schedule.

        Safe to race: whichever caller finds nothing left to remove returns
        False without recording anything. With `already_unscheduled` the
        caller has popped the heap entry itself, so only the store and the
        cache count as evidence that the key was still live.
        """
        start = time.perf_counter()
        deleted = await self._store_call("delete", key, lambda: self._store.delete(key))
        async with self._lock:
            in_cache = self._cache.remove(key)
            scheduled = False if already_unscheduled else self._scheduler.remove(key)
            if not (deleted or in_cache or scheduled):
                return False
            self._record(ExpiredRecord, key, start, reason)
        metrics.linkcache_expired_total.inc(reason=reason)
        _logger.debug("Expired %s (%s)", key, reason)
        return True

    async def pop_due(self, now: t.Optional[float] = None) -> t.Optional[ExpiryEntry]:
        now = self._clock() if now is None else now
        async with self._lock:
            head = self._scheduler.peek_min()
            if head is None or head.expires_at > now:
                return None
            return self._scheduler.extract_min()

    async def reschedule(self, entry: ExpiryEntry) -> None:
        async with self._lock:
            self._scheduler.insert(entry.key, entry.expires_at)

    async def restore_schedule(self) -> int:
        restored = 0
        try:
            async for record in self._store.scan():
                if not record.policy.is_time_based:
                    continue
                async with self._lock:
                    self._scheduler.insert(record.key, t.cast(float, record.policy.expires_at))
                restored += 1
        except Exception as exc:
            raise StoreUnavailable("scan") from exc
        return restored

    # Observability

    def stats(self) -> CacheStats:
        hits = misses = 0
        for rec in self._recorder.recent(RecordCategory.CACHE):
            if rec.kind == OperationKind.HIT:
                hits += 1
            elif rec.kind == OperationKind.MISS:
                misses += 1
        total = hits + misses
        return CacheStats(
            size=self._cache.size(),
            capacity=self._cache.capacity,
            recent_hit_rate=(hits / total) if total else 0.0,
        )

    def schedule_snapshot(self) -> t.List[ScheduledExpiry]:
        now = self._clock()
        return [
            ScheduledExpiry(key=e.key, expires_at=e.expires_at, time_remaining=max(0.0, e.expires_at - now))
            for e in self._scheduler.snapshot()
        ]

    def recent(self, category: t.Union[RecordCategory, str], n: t.Optional[int] = None) -> t.List[OperationRecord]:
        return self._recorder.recent(category, n)

    def cached_keys(self) -> t.List[str]:
        return self._cache.keys()

    def check_invariants(self) -> None:
        if self._cache.size() > self._cache.capacity:
            raise InvariantViolation(f"cache size {self._cache.size()} exceeds capacity {self._cache.capacity}")
        self._scheduler.validate()

    # Internals

    async def _store_call(self, operation: str, key: str, fn: t.Callable[[], t.Awaitable[T]]) -> T:
        start = time.perf_counter()
        try:
            return await fn()
        except Exception as exc:
            _logger.debug("Store %s failed for %s: %s", operation, key, exc)
            raise StoreUnavailable(operation, key) from exc
        finally:
            metrics.linkcache_store_latency_seconds.observe(time.perf_counter() - start, op=operation)

    def _record(self, record_cls: t.Any, key: str, start: float, detail: str) -> None:
        self._recorder.record(
            record_cls(
                key=key,
                duration_ms=(time.perf_counter() - start) * 1000.0,
                complexity="O(1)",
                detail=detail,
                size=self._cache.size(),
            )
        )

    def _outcome(self, key: str, value: t.Optional[str], outcome: LookupOutcome) -> LookupResult:
        metrics.linkcache_lookup_total.inc(outcome=outcome.value)
        _logger.debug("Lookup %s -> %s", key, outcome.value)
        return LookupResult(value=value, outcome=outcome)
