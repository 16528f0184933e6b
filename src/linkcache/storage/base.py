from __future__ import annotations

import typing as t
from abc import ABC, abstractmethod
from dataclasses import replace

from ..core.models import LinkRecord


class LinkStore(ABC):
    """Durable, key-indexed link record store consumed by the coordinator.

    Calls are individually atomic; nothing here is transactional across calls.
    """

    @abstractmethod
    async def get(self, key: str) -> t.Optional[LinkRecord]:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def put(self, record: LinkRecord) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key: str) -> bool:  # pragma: no cover - interface
        """Delete a record. Returns False if it was already absent."""
        raise NotImplementedError

    @abstractmethod
    async def increment_counter(self, key: str) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def find_by_value(self, value: str) -> t.Optional[LinkRecord]:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def scan(self) -> t.AsyncIterator[LinkRecord]:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def is_healthy(self) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    async def close(self) -> None:
        return None


class InMemoryLinkStore(LinkStore):
    """A simple in-memory adapter for dev/test.

    Not intended for production, but implements the same async interface.
    """

    def __init__(self) -> None:
        self._records: t.Dict[str, LinkRecord] = {}
        self._by_value: t.Dict[str, str] = {}

    async def get(self, key: str) -> t.Optional[LinkRecord]:
        record = self._records.get(key)
        # hand out copies so callers cannot mutate stored state
        return replace(record) if record is not None else None

    async def put(self, record: LinkRecord) -> None:
        previous = self._records.get(record.key)
        if previous is not None and self._by_value.get(previous.value) == record.key:
            self._by_value.pop(previous.value, None)
        self._records[record.key] = replace(record)
        self._by_value[record.value] = record.key

    async def delete(self, key: str) -> bool:
        record = self._records.pop(key, None)
        if record is None:
            return False
        if self._by_value.get(record.value) == key:
            self._by_value.pop(record.value, None)
        return True

    async def increment_counter(self, key: str) -> int:
        record = self._records.get(key)
        if record is None:
            return 0
        record.clicks += 1
        return record.clicks

    async def find_by_value(self, value: str) -> t.Optional[LinkRecord]:
        key = self._by_value.get(value)
        if key is None:
            return None
        return await self.get(key)

    async def scan(self) -> t.AsyncIterator[LinkRecord]:
        for record in list(self._records.values()):
            yield replace(record)

    async def is_healthy(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._records)
