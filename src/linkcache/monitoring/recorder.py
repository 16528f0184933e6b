from __future__ import annotations

import typing as t
from collections import deque
from typing import Deque, Dict, List

from linkcache.core.models import AnyRecord, OperationRecord, RecordCategory


class EventRecorder:
    """Bounded, append-only operation log kept per category.

    Oldest records fall off the front once a category's retention count is
    exceeded. Readers always receive copies, so producers never wait on them.
    """

    def __init__(self, cache_retention: int = 100, heap_retention: int = 50) -> None:
        self._logs: Dict[RecordCategory, Deque[OperationRecord]] = {
            RecordCategory.CACHE: deque(maxlen=max(1, cache_retention)),
            RecordCategory.HEAP: deque(maxlen=max(1, heap_retention)),
        }

    def record(self, record: AnyRecord) -> None:
        self._logs[record.category].append(record)

    def recent(self, category: t.Union[RecordCategory, str], n: t.Optional[int] = None) -> List[OperationRecord]:
        log = self._logs[RecordCategory(category)]
        items = list(log)
        if n is None:
            return items
        if n <= 0:
            return []
        return items[-n:]

    def retention(self, category: t.Union[RecordCategory, str]) -> int:
        return self._logs[RecordCategory(category)].maxlen or 0

    def __len__(self) -> int:
        return sum(len(log) for log in self._logs.values())

    def clear(self) -> None:
        for log in self._logs.values():
            log.clear()
