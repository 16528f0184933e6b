from __future__ import annotations

import itertools
import time
import typing as t

from linkcache.core.errors import InvariantViolation
from linkcache.core.models import ExpiryEntry, HeapExtractRecord, HeapInsertRecord
from linkcache.monitoring.recorder import EventRecorder


class ExpiryScheduler:
    """Binary min-heap of link deadlines.

    Entries compare on (expires_at, seq), so equal deadlines come out in
    insertion order. Only the root is ever inspected by the sweeper; lookups
    by key fall back to a linear scan.
    """

    def __init__(self, recorder: t.Optional[EventRecorder] = None) -> None:
        self._heap: t.List[ExpiryEntry] = []
        self._seq = itertools.count()
        self._recorder = recorder

    def insert(self, key: str, expires_at: float) -> ExpiryEntry:
        start = time.perf_counter()
        # a key is scheduled at most once; the newest deadline wins
        self._remove_index(self._index_of(key))
        entry = ExpiryEntry(expires_at=float(expires_at), seq=next(self._seq), key=key)
        self._heap.append(entry)
        self._sift_up(len(self._heap) - 1)
        self._emit(HeapInsertRecord, key, start, f"Scheduled expiry at {entry.expires_at:.3f}")
        return entry

    def peek_min(self) -> t.Optional[ExpiryEntry]:
        return self._heap[0] if self._heap else None

    def extract_min(self) -> t.Optional[ExpiryEntry]:
        if not self._heap:
            return None
        start = time.perf_counter()
        root = self._heap[0]
        last = self._heap.pop()
        if self._heap:
            self._heap[0] = last
            self._sift_down(0)
        self._emit(HeapExtractRecord, root.key, start, "Extracted earliest deadline")
        return root

    def remove(self, key: str) -> bool:
        return self._remove_index(self._index_of(key))

    def contains(self, key: str) -> bool:
        return self._index_of(key) is not None

    def size(self) -> int:
        return len(self._heap)

    def snapshot(self) -> t.List[ExpiryEntry]:
        return sorted(self._heap)

    def validate(self) -> None:
        heap = self._heap
        for i in range(1, len(heap)):
            parent = (i - 1) // 2
            if heap[i] < heap[parent]:
                raise InvariantViolation(
                    f"heap property violated at index {i}: {heap[i].key!r} precedes parent {heap[parent].key!r}"
                )

    def clear(self) -> None:
        self._heap.clear()

    def __len__(self) -> int:
        return len(self._heap)

    def _index_of(self, key: str) -> t.Optional[int]:
        for i, entry in enumerate(self._heap):
            if entry.key == key:
                return i
        return None

    def _remove_index(self, index: t.Optional[int]) -> bool:
        if index is None:
            return False
        last = self._heap.pop()
        if index < len(self._heap):
            # the moved entry may belong above or below its new slot
            self._heap[index] = last
            self._sift_up(index)
            self._sift_down(index)
        return True

    def _sift_up(self, index: int) -> None:
        heap = self._heap
        while index > 0:
            parent = (index - 1) // 2
            if heap[index] < heap[parent]:
                heap[index], heap[parent] = heap[parent], heap[index]
                index = parent
            else:
                break

    def _sift_down(self, index: int) -> None:
        heap = self._heap
        size = len(heap)
        while True:
            left = 2 * index + 1
            right = left + 1
            smallest = index
            if left < size and heap[left] < heap[smallest]:
                smallest = left
            if right < size and heap[right] < heap[smallest]:
                smallest = right
            if smallest == index:
                break
            heap[index], heap[smallest] = heap[smallest], heap[index]
            index = smallest

    def _emit(self, record_cls: t.Any, key: str, start: float, detail: str) -> None:
        if self._recorder is None:
            return
        self._recorder.record(
            record_cls(
                key=key,
                duration_ms=(time.perf_counter() - start) * 1000.0,
                detail=detail,
                size=len(self._heap),
            )
        )
