from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
import logging
from typing import Callable, DefaultDict, List, Type


@dataclass(frozen=True)
class Subscription:
    event_type: Type[object]
    token: int


class EventBus:
    """Typed observer hub the engine publishes state changes through.

    Handlers run synchronously in (priority, registration) order. A failing
    handler is logged and isolated so one broken UI subscriber cannot stop the
    engine or the remaining subscribers.
    """

    def __init__(self) -> None:
        self._subscribers: DefaultDict[Type[object], List[tuple[int, int, Callable[[object], None]]]] = defaultdict(list)
        self._next_order = 0
        self._last_publish_errors: List[Exception] = []
        self._published_count = 0
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[object], handler: Callable[[object], None], *, priority: int = 100) -> Subscription:
        token = self._next_order
        self._subscribers[event_type].append((int(priority), token, handler))
        self._next_order += 1
        self._subscribers[event_type].sort(key=lambda row: (row[0], row[1]))
        return Subscription(event_type=event_type, token=token)

    def unsubscribe(self, subscription: Subscription) -> bool:
        rows = self._subscribers.get(subscription.event_type, [])
        kept = [row for row in rows if row[1] != subscription.token]
        if len(kept) == len(rows):
            return False
        self._subscribers[subscription.event_type] = kept
        return True

    def publish(self, event: object) -> None:
        self._published_count += 1
        handlers = tuple(self._subscribers.get(type(event), ()))
        failures = [self._deliver(event, priority, handler) for priority, _, handler in handlers]
        self._last_publish_errors = [exc for exc in failures if exc is not None]

    def _deliver(self, event: object, priority: int, handler: Callable[[object], None]) -> Exception | None:
        try:
            handler(event)
        except Exception as exc:
            self._logger.exception(
                "Handler %s raised while handling %s",
                getattr(handler, "__qualname__", repr(handler)),
                type(event).__name__,
                extra={"priority": priority},
            )
            return exc
        return None

    def last_publish_errors(self) -> List[Exception]:
        return list(self._last_publish_errors)

    @property
    def published_count(self) -> int:
        return self._published_count
