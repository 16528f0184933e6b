"""Core models and errors for the link cache.

The coordinator and sweeper live in this package too but are imported from
their own modules (or from `linkcache`) to keep this namespace import-light.
"""

from .errors import CircuitOpen, InvariantViolation, LinkCacheError, StoreUnavailable
from .models import (
    AnyRecord,
    CacheStats,
    ExpiryEntry,
    ExpiryKind,
    ExpiryPolicy,
    LinkRecord,
    LookupOutcome,
    LookupResult,
    OperationKind,
    OperationRecord,
    RecordCategory,
    ScheduledExpiry,
)

__all__ = [
    # Errors
    "LinkCacheError",
    "StoreUnavailable",
    "InvariantViolation",
    "CircuitOpen",
    # Models
    "LinkRecord",
    "ExpiryPolicy",
    "ExpiryKind",
    "ExpiryEntry",
    "LookupOutcome",
    "LookupResult",
    "ScheduledExpiry",
    "CacheStats",
    "OperationKind",
    "OperationRecord",
    "RecordCategory",
    "AnyRecord",
]
