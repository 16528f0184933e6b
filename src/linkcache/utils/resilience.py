from __future__ import annotations

import asyncio
import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, TypeVar

from linkcache.core.errors import CircuitOpen

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CircuitBreakerConfig:
    failure_threshold: int = 5
    reset_timeout_seconds: float = 30.0


@dataclass
class RetryPolicy:
    """How many times a store call is attempted and how long to wait between tries."""

    attempts: int = 3
    backoff_ms: List[int] = field(default_factory=lambda: [100, 500, 2000])

    def __post_init__(self) -> None:
        self.attempts = max(1, self.attempts)
        if not self.backoff_ms:
            self.backoff_ms = [0]

    def delay_seconds(self, attempt: int) -> float:
        """Pause after the `attempt`-th failure (0-based); the last step repeats."""
        return self.backoff_ms[min(attempt, len(self.backoff_ms) - 1)] / 1000.0


class CircuitState(str, enum.Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Stops calling a failing store until a cool-down has passed.

    After `failure_threshold` consecutive failures the circuit opens and calls
    are refused with `CircuitOpen`. Once `reset_timeout_seconds` elapse a
    single trial call is let through: success closes the circuit, failure
    re-opens it straight away.
    """

    def __init__(
        self,
        config: Optional[CircuitBreakerConfig] = None,
        *,
        name: str = "store",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or CircuitBreakerConfig()
        self._name = name
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = 0.0

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failures(self) -> int:
        return self._failures

    def reset(self) -> None:
        self._transition(CircuitState.CLOSED)
        self._failures = 0

    def _transition(self, state: CircuitState) -> None:
        if state != self._state:
            _logger.info("Circuit %s: %s -> %s", self._name, self._state.value, state.value)
            self._state = state

    def _can_attempt(self) -> bool:
        if self._state != CircuitState.OPEN:
            return True
        if (self._clock() - self._opened_at) >= self._config.reset_timeout_seconds:
            self._transition(CircuitState.HALF_OPEN)
            return True
        return False

    def _on_failure(self) -> None:
        self._failures += 1
        if self._state == CircuitState.HALF_OPEN or self._failures >= self._config.failure_threshold:
            self._opened_at = self._clock()
            self._transition(CircuitState.OPEN)

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        if not self._can_attempt():
            raise CircuitOpen(self._name)
        try:
            result = await fn()
        except Exception:
            self._on_failure()
            raise
        self.reset()
        return result


async def with_retries(
    coro_factory: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    *,
    operation: str = "call",
) -> T:
    """Await `coro_factory()` until it succeeds or the policy runs out of attempts.

    The last failure is re-raised unchanged.
    """
    policy = policy or RetryPolicy()
    for attempt in range(policy.attempts):
        try:
            return await coro_factory()
        except Exception as exc:  # noqa: BLE001 - broad for retry wrapper
            if attempt == policy.attempts - 1:
                raise
            delay = policy.delay_seconds(attempt)
            _logger.warning(
                "Store %s failed (attempt %d/%d), retrying in %.3fs: %s",
                operation,
                attempt + 1,
                policy.attempts,
                delay,
                exc,
            )
            await asyncio.sleep(delay)
    raise AssertionError("unreachable")  # pragma: no cover
