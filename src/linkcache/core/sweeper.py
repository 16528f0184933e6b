from __future__ import annotations

import asyncio
import logging
import typing as t

from .errors import StoreUnavailable

if t.TYPE_CHECKING:  # pragma: no cover
    from .coordinator import Coordinator

_logger = logging.getLogger(__name__)

TIME_LIMIT_REACHED = "time limit reached"


class Sweeper:
    """Periodically drains due entries from the expiry heap.

    Each tick only looks at the heap root and stops at the first deadline
    still in the future, so a tick costs O(k log n) for k newly due links.
    """

    def __init__(self, coordinator: "Coordinator", interval_seconds: float = 5.0) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._coordinator = coordinator
        self._interval = float(interval_seconds)
        self._stop_event = asyncio.Event()
        self._task: t.Optional[asyncio.Task[None]] = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="linkcache-sweeper")

    async def stop(self) -> None:
        task = self._task
        if task is None:
            return
        self._stop_event.set()
        try:
            await task
        finally:
            self._task = None

    async def run_once(self, now: t.Optional[float] = None) -> int:
        expired = 0
        while True:
            entry = await self._coordinator.pop_due(now)
            if entry is None:
                break
            try:
                removed = await self._coordinator.expire(entry.key, TIME_LIMIT_REACHED, already_unscheduled=True)
            except StoreUnavailable as exc:
                # put it back so the next tick retries the store delete
                await self._coordinator.reschedule(entry)
                _logger.warning("Sweep stopped early, store unavailable for %s: %s", entry.key, exc.__cause__ or exc)
                break
            if removed:
                expired += 1
        if expired:
            _logger.info("Sweep expired %d link(s)", expired)
        return expired

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.run_once()
            except Exception:
                _logger.exception("Sweep tick failed")
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
