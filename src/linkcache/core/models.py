from __future__ import annotations

import enum
import time
import typing as t
from dataclasses import dataclass, field


class ExpiryKind(str, enum.Enum):
    NONE = "none"
    TIME = "time"
    CLICKS = "clicks"


@dataclass(frozen=True)
class ExpiryPolicy:
    kind: ExpiryKind = ExpiryKind.NONE
    expires_at: t.Optional[float] = None
    max_clicks: t.Optional[int] = None

    @classmethod
    def none(cls) -> "ExpiryPolicy":
        return cls()

    @classmethod
    def at(cls, expires_at: float) -> "ExpiryPolicy":
        return cls(kind=ExpiryKind.TIME, expires_at=float(expires_at))

    @classmethod
    def after_clicks(cls, max_clicks: int) -> "ExpiryPolicy":
        if max_clicks < 1:
            raise ValueError("max_clicks must be >= 1")
        return cls(kind=ExpiryKind.CLICKS, max_clicks=int(max_clicks))

    @property
    def is_time_based(self) -> bool:
        return self.kind == ExpiryKind.TIME and self.expires_at is not None

    def reason(self) -> str:
        if self.kind == ExpiryKind.TIME:
            return "time limit reached"
        if self.kind == ExpiryKind.CLICKS:
            return "click limit reached"
        return "removed"


@dataclass
class LinkRecord:
    key: str
    value: str
    policy: ExpiryPolicy = field(default_factory=ExpiryPolicy)
    clicks: int = 0
    created_at: float = field(default_factory=lambda: time.time())

    def is_expired(self, now: float) -> bool:
        policy = self.policy
        if policy.kind == ExpiryKind.TIME and policy.expires_at is not None:
            # due at the instant itself, matching the sweeper's cut-off
            return now >= policy.expires_at
        if policy.kind == ExpiryKind.CLICKS and policy.max_clicks:
            return self.clicks >= policy.max_clicks
        return False

    def to_dict(self) -> t.Dict[str, t.Any]:
        return {
            "key": self.key,
            "value": self.value,
            "expiry_type": self.policy.kind.value,
            "expires_at": self.policy.expires_at,
            "max_clicks": self.policy.max_clicks,
            "clicks": self.clicks,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: t.Dict[str, t.Any]) -> "LinkRecord":
        policy = ExpiryPolicy(
            kind=ExpiryKind(data.get("expiry_type") or ExpiryKind.NONE.value),
            expires_at=data.get("expires_at"),
            max_clicks=data.get("max_clicks"),
        )
        return cls(
            key=data["key"],
            value=data["value"],
            policy=policy,
            clicks=int(data.get("clicks", 0)),
            created_at=float(data.get("created_at", time.time())),
        )


@dataclass(frozen=True, order=True)
class ExpiryEntry:
    expires_at: float
    seq: int
    key: str = field(compare=False)


class LookupOutcome(str, enum.Enum):
    CACHE_HIT = "cache_hit"
    CACHE_MISS_STORE_HIT = "cache_miss_store_hit"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"


@dataclass(frozen=True)
class LookupResult:
    value: t.Optional[str]
    outcome: LookupOutcome

    @property
    def found(self) -> bool:
        return self.outcome in (LookupOutcome.CACHE_HIT, LookupOutcome.CACHE_MISS_STORE_HIT)


@dataclass(frozen=True)
class ScheduledExpiry:
    key: str
    expires_at: float
    time_remaining: float


@dataclass(frozen=True)
class CacheStats:
    size: int
    capacity: int
    recent_hit_rate: float


# Operation log
class OperationKind(str, enum.Enum):
    SET = "SET"
    HIT = "HIT"
    MISS = "MISS"
    EVICT = "EVICT"
    EXPIRED = "EXPIRED"
    DEDUP = "DEDUP"
    HEAP_INSERT = "HEAP_INSERT"
    HEAP_EXTRACT = "HEAP_EXTRACT"


class RecordCategory(str, enum.Enum):
    CACHE = "cache"
    HEAP = "heap"


@dataclass(frozen=True)
class OperationRecord:
    kind: t.ClassVar[OperationKind]
    category: t.ClassVar[RecordCategory] = RecordCategory.CACHE

    key: str
    duration_ms: float = 0.0
    complexity: str = "O(1)"
    detail: str = ""
    size: int = 0
    timestamp: float = field(default_factory=lambda: time.time())

    def to_dict(self) -> t.Dict[str, t.Any]:
        return {
            "type": self.kind.value,
            "key": self.key,
            "duration_ms": round(self.duration_ms, 4),
            "complexity": self.complexity,
            "detail": self.detail,
            "size": self.size,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class SetRecord(OperationRecord):
    kind: t.ClassVar[OperationKind] = OperationKind.SET


@dataclass(frozen=True)
class HitRecord(OperationRecord):
    kind: t.ClassVar[OperationKind] = OperationKind.HIT


@dataclass(frozen=True)
class MissRecord(OperationRecord):
    kind: t.ClassVar[OperationKind] = OperationKind.MISS


@dataclass(frozen=True)
class EvictRecord(OperationRecord):
    kind: t.ClassVar[OperationKind] = OperationKind.EVICT


@dataclass(frozen=True)
class ExpiredRecord(OperationRecord):
    kind: t.ClassVar[OperationKind] = OperationKind.EXPIRED


@dataclass(frozen=True)
class DedupRecord(OperationRecord):
    kind: t.ClassVar[OperationKind] = OperationKind.DEDUP


@dataclass(frozen=True)
class HeapInsertRecord(OperationRecord):
    kind: t.ClassVar[OperationKind] = OperationKind.HEAP_INSERT
    category: t.ClassVar[RecordCategory] = RecordCategory.HEAP
    complexity: str = "O(log n)"


@dataclass(frozen=True)
class HeapExtractRecord(OperationRecord):
    kind: t.ClassVar[OperationKind] = OperationKind.HEAP_EXTRACT
    category: t.ClassVar[RecordCategory] = RecordCategory.HEAP
    complexity: str = "O(log n)"


AnyRecord = t.Union[
    SetRecord,
    HitRecord,
    MissRecord,
    EvictRecord,
    ExpiredRecord,
    DedupRecord,
    HeapInsertRecord,
    HeapExtractRecord,
]
