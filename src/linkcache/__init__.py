"""linkcache

A hybrid caching and expiry engine for short links: a bounded LRU cache, a
min-heap expiry schedule drained by a background sweeper, and a bounded
operation log, all reconciled against a durable link store.
"""

from .cache import BoundedCache, ExpiryScheduler
from .core.coordinator import Coordinator
from .core.errors import CircuitOpen, InvariantViolation, LinkCacheError, StoreUnavailable
from .core.models import (
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
from .core.sweeper import Sweeper
from .monitoring import EventRecorder
from .storage import (
    InMemoryLinkStore,
    LinkStore,
    RedisLinkStore,
    ResilientLinkStore,
    create_store,
)
from .utils.config import LinkCacheConfig

__all__ = [
    "Coordinator",
    "Sweeper",
    "BoundedCache",
    "ExpiryScheduler",
    "EventRecorder",
    "LinkStore",
    "InMemoryLinkStore",
    "RedisLinkStore",
    "ResilientLinkStore",
    "create_store",
    "LinkCacheConfig",
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
    "LinkCacheError",
    "StoreUnavailable",
    "InvariantViolation",
    "CircuitOpen",
]

__version__ = "0.1.0"
