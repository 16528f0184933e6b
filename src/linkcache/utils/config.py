from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class CacheConfig:
    capacity: int = 100


@dataclass
class SweeperConfig:
    enabled: bool = True
    interval_seconds: float = 5.0


@dataclass
class RecorderConfig:
    cache_retention: int = 100
    heap_retention: int = 50


@dataclass
class StorageConfig:
    type: str = "memory"  # memory | redis
    connection_string: Optional[str] = None
    prefix: str = "links"


@dataclass
class ResilienceConfig:
    circuit_breaker_enabled: bool = True
    failure_threshold: int = 5
    reset_timeout_seconds: float = 30.0
    retry_max_attempts: int = 3
    retry_backoff_ms: List[int] = dataclasses.field(default_factory=lambda: [100, 500, 2000])


@dataclass
class CoordinatorConfig:
    dedupe_values: bool = False
    restore_on_start: bool = True


@dataclass
class LinkCacheConfig:
    cache: CacheConfig = dataclasses.field(default_factory=CacheConfig)
    sweeper: SweeperConfig = dataclasses.field(default_factory=SweeperConfig)
    recorder: RecorderConfig = dataclasses.field(default_factory=RecorderConfig)
    storage: StorageConfig = dataclasses.field(default_factory=StorageConfig)
    resilience: ResilienceConfig = dataclasses.field(default_factory=ResilienceConfig)
    coordinator: CoordinatorConfig = dataclasses.field(default_factory=CoordinatorConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LinkCacheConfig":
        def build(dc_cls, key):
            values = data.get(key, {})
            return dc_cls(**values)

        return cls(
            cache=build(CacheConfig, "cache"),
            sweeper=build(SweeperConfig, "sweeper"),
            recorder=build(RecorderConfig, "recorder"),
            storage=build(StorageConfig, "storage"),
            resilience=build(ResilienceConfig, "resilience"),
            coordinator=build(CoordinatorConfig, "coordinator"),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LinkCacheConfig":
        """Build a config from `LINKCACHE_<SECTION>_<FIELD>` variables.

        Unset or unparsable variables keep the dataclass default.
        """
        env = os.environ if environ is None else environ
        sections: Dict[str, Dict[str, Any]] = {}
        defaults = cls()
        for section in dataclasses.fields(cls):
            current = getattr(defaults, section.name)
            values: Dict[str, Any] = {}
            for f in dataclasses.fields(current):
                name = f"LINKCACHE_{section.name}_{f.name}".upper()
                raw = env.get(name)
                if raw is None:
                    continue
                parsed = _parse(raw, getattr(current, f.name))
                if parsed is not None:
                    values[f.name] = parsed
            sections[section.name] = values
        return cls.from_dict(sections)


def _parse(raw: str, default: Any) -> Any:
    raw = raw.strip()
    if isinstance(default, bool):
        return raw.lower() in {"1", "true", "yes", "y", "on"}
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            return None
    if isinstance(default, float):
        try:
            return float(raw)
        except ValueError:
            return None
    if isinstance(default, list):
        try:
            return [int(part) for part in raw.split(",") if part.strip()]
        except ValueError:
            return None
    return raw
