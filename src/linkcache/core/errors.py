from __future__ import annotations


class LinkCacheError(Exception):
    """Base error for the link cache."""


class StoreUnavailable(LinkCacheError):
    """Raised when a call to the durable link store fails."""

    def __init__(self, operation: str, key: str | None = None) -> None:
        self.operation = operation
        self.key = key
        target = f" for {key!r}" if key is not None else ""
        super().__init__(f"store {operation} failed{target}")


class InvariantViolation(LinkCacheError, AssertionError):
    """Raised when a cache bound or the heap property no longer holds."""


class CircuitOpen(LinkCacheError):
    """Raised instead of calling a store whose circuit breaker is open."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"circuit open for {name}")
