from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass
class Counter:
    name: str
    help: str
    values: Dict[Tuple, float] = field(default_factory=dict)

    def inc(self, value: float = 1.0, **labels: Any) -> None:
        key = tuple(sorted(labels.items()))
        self.values[key] = self.values.get(key, 0.0) + value

    def get(self, **labels: Any) -> float:
        return self.values.get(tuple(sorted(labels.items())), 0.0)

    def reset(self) -> None:
        self.values.clear()


@dataclass
class Histogram:
    name: str
    help: str
    buckets: List[float]
    counts: Dict[Tuple, List[int]] = field(default_factory=dict)

    def observe(self, val: float, **labels: Any) -> None:
        key = tuple(sorted(labels.items()))
        if key not in self.counts:
            # trailing slot counts observations above the last bucket
            self.counts[key] = [0 for _ in range(len(self.buckets) + 1)]
        for i, b in enumerate(self.buckets):
            if val <= b:
                self.counts[key][i] += 1
                break
        else:
            self.counts[key][-1] += 1

    def total(self, **labels: Any) -> int:
        return sum(self.counts.get(tuple(sorted(labels.items())), []))

    def reset(self) -> None:
        self.counts.clear()


# Predefined metrics
linkcache_lookup_total = Counter("linkcache_lookup_total", "Lookups by outcome")
linkcache_expired_total = Counter("linkcache_expired_total", "Links reconciled as expired, by reason")
linkcache_evictions_total = Counter("linkcache_evictions_total", "LRU capacity evictions")
linkcache_store_latency_seconds = Histogram(
    "linkcache_store_latency_seconds",
    "Durable store call latency",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)


def reset_all() -> None:
    for metric in (
        linkcache_lookup_total,
        linkcache_expired_total,
        linkcache_evictions_total,
        linkcache_store_latency_seconds,
    ):
        metric.reset()
