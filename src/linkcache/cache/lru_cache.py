from __future__ import annotations

import time
import typing as t
from collections import OrderedDict

from linkcache.core.errors import InvariantViolation
from linkcache.core.models import EvictRecord, HitRecord, SetRecord
from linkcache.monitoring import metrics
from linkcache.monitoring.recorder import EventRecorder


class BoundedCache:
    """Fixed-capacity LRU map from short code to target.

    Ordering of the backing OrderedDict is the only recency state: first is
    least recently used, last is most recently used. Eviction is purely
    capacity based and knows nothing about link expiry.
    """

    def __init__(self, capacity: int = 100, recorder: t.Optional[EventRecorder] = None) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._store: "OrderedDict[str, str]" = OrderedDict()
        self._capacity = int(capacity)
        self._recorder = recorder

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: str) -> t.Tuple[t.Optional[str], bool]:
        start = time.perf_counter()
        value = self._store.get(key)
        if value is None:
            return None, False
        # mark as recently used
        self._store.move_to_end(key)
        self._emit(HitRecord, key, start, "Served from cache")
        return value, True

    def put(self, key: str, value: str) -> None:
        start = time.perf_counter()
        if key in self._store:
            self._store[key] = value
            self._store.move_to_end(key)
            self._emit(SetRecord, key, start, "Updated existing entry")
            return

        if len(self._store) >= self._capacity:
            # evict LRU
            evicted, _ = self._store.popitem(last=False)
            metrics.linkcache_evictions_total.inc()
            self._emit(EvictRecord, evicted, start, f"Capacity {self._capacity} reached; evicted {evicted}")

        self._store[key] = value
        if len(self._store) > self._capacity:
            raise InvariantViolation(f"cache size {len(self._store)} exceeds capacity {self._capacity}")
        self._emit(SetRecord, key, start, "Inserted at most recently used end")

    def remove(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def size(self) -> int:
        return len(self._store)

    def keys(self) -> t.List[str]:
        return list(self._store.keys())

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    def _emit(self, record_cls: t.Any, key: str, start: float, detail: str) -> None:
        if self._recorder is None:
            return
        self._recorder.record(
            record_cls(
                key=key,
                duration_ms=(time.perf_counter() - start) * 1000.0,
                complexity="O(1)",
                detail=detail,
                size=len(self._store),
            )
        )
