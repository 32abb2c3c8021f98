from __future__ import annotations

import logging

from worldsmith.application.dtos import RewardView
from worldsmith.application.services.event_bus import EventBus
from worldsmith.application.services.scheduler import ScheduledTask, Scheduler
from worldsmith.domain.events import RewardCleared, RewardPublished
from worldsmith.domain.models.reward import RewardEvent


logger = logging.getLogger(__name__)


class RewardSurface:
    """Single slot holding the loot notification the HUD is showing."""

    def __init__(
        self,
        event_bus: EventBus | None = None,
        scheduler: Scheduler | None = None,
        display_ms: int | None = None,
    ) -> None:
        self.event_bus = event_bus
        self.scheduler = scheduler
        self.display_ms = display_ms
        self._current: RewardEvent | None = None
        self._auto_clear: ScheduledTask | None = None

    @property
    def current(self) -> RewardEvent | None:
        return self._current

    def view(self) -> RewardView | None:
        if self._current is None:
            return None
        return RewardView(
            item_id=self._current.item_id,
            amount=self._current.amount,
            experience=self._current.experience,
        )

    def publish(self, event: RewardEvent) -> None:
        self._cancel_auto_clear()
        if self._current is not None:
            logger.debug("Replacing reward %s with %s", self._current.item_id, event.item_id)
        self._current = event
        if self.scheduler is not None and self.display_ms is not None:
            self._auto_clear = self.scheduler.call_later(
                self.display_ms,
                lambda: self._expire(event),
                name="reward:auto_clear",
            )
        if self.event_bus is not None:
            self.event_bus.publish(
                RewardPublished(item_id=event.item_id, amount=event.amount, experience=event.experience)
            )

    def clear(self) -> bool:
        self._cancel_auto_clear()
        if self._current is None:
            return False
        cleared = self._current
        self._current = None
        if self.event_bus is not None:
            self.event_bus.publish(RewardCleared(item_id=cleared.item_id))
        return True

    def _expire(self, event: RewardEvent) -> None:
        # A newer reward owns the slot now.
        if self._current is not event:
            return
        self._auto_clear = None
        self.clear()

    def _cancel_auto_clear(self) -> None:
        if self._auto_clear is not None:
            self._auto_clear.cancel()
            self._auto_clear = None
