from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import heapq
import logging
from typing import Callable


@dataclass(eq=False)
class ScheduledTask:
    """Handle for a deferred callback.

    Recurring tasks carry an ``interval_ms`` and are re-queued after each run
    until cancelled.
    """

    due_ms: int
    order: int
    callback: Callable[[], None]
    name: str = ""
    interval_ms: int | None = None
    cancelled: bool = False
    runs: int = 0

    def cancel(self) -> bool:
        if self.cancelled:
            return False
        self.cancelled = True
        return True

    @property
    def recurring(self) -> bool:
        return self.interval_ms is not None

    def __lt__(self, other: "ScheduledTask") -> bool:
        return (self.due_ms, self.order) < (other.due_ms, other.order)


class Scheduler(ABC):
    @abstractmethod
    def now_ms(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None], *, name: str = "") -> ScheduledTask:
        raise NotImplementedError

    @abstractmethod
    def call_every(self, interval_ms: int, callback: Callable[[], None], *, name: str = "") -> ScheduledTask:
        raise NotImplementedError


@dataclass
class ManualClock(Scheduler):
    """Virtual millisecond clock driven by explicit ``advance`` calls.

    The host (game loop, test) decides when time moves; due tasks run in
    due-time order, ties broken by scheduling order.
    """

    start_ms: int = 0
    _now: int = field(init=False, default=0)
    _queue: list[ScheduledTask] = field(init=False, default_factory=list)
    _next_order: int = field(init=False, default=0)
    _logger: logging.Logger = field(init=False, repr=False, default_factory=lambda: logging.getLogger(__name__))

    def __post_init__(self) -> None:
        self._now = int(self.start_ms)

    def now_ms(self) -> int:
        return self._now

    def call_later(self, delay_ms: int, callback: Callable[[], None], *, name: str = "") -> ScheduledTask:
        task = ScheduledTask(
            due_ms=self._now + max(0, int(delay_ms)),
            order=self._take_order(),
            callback=callback,
            name=name,
        )
        heapq.heappush(self._queue, task)
        return task

    def call_every(self, interval_ms: int, callback: Callable[[], None], *, name: str = "") -> ScheduledTask:
        interval = int(interval_ms)
        if interval <= 0:
            raise ValueError("Recurring interval must be positive")
        task = ScheduledTask(
            due_ms=self._now + interval,
            order=self._take_order(),
            callback=callback,
            name=name,
            interval_ms=interval,
        )
        heapq.heappush(self._queue, task)
        return task

    def advance(self, delta_ms: int) -> int:
        """Move time forward, running every task that comes due. Returns runs."""

        target = self._now + max(0, int(delta_ms))
        executed = 0
        while self._queue and self._queue[0].due_ms <= target:
            task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self._now = max(self._now, task.due_ms)
            self._run(task)
            executed += 1
            if task.recurring and not task.cancelled:
                task.due_ms += int(task.interval_ms or 0)
                task.order = self._take_order()
                heapq.heappush(self._queue, task)
        self._now = target
        return executed

    def run_pending(self) -> int:
        return self.advance(0)

    def pending_count(self) -> int:
        return sum(1 for task in self._queue if not task.cancelled)

    def _run(self, task: ScheduledTask) -> None:
        task.runs += 1
        try:
            task.callback()
        except Exception:
            self._logger.exception(
                "Scheduled task failed and was isolated",
                extra={"task": task.name or repr(task.callback), "due_ms": task.due_ms},
            )

    def _take_order(self) -> int:
        order = self._next_order
        self._next_order += 1
        return order
