import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from worldsmith.application.services.event_bus import EventBus
from worldsmith.application.services.reward_surface import RewardSurface
from worldsmith.application.services.scheduler import ManualClock
from worldsmith.domain.events import RewardCleared, RewardPublished
from worldsmith.domain.models.reward import RewardEvent


class RewardSurfaceTests(unittest.TestCase):
    def test_publish_replaces_current_reward(self) -> None:
        surface = RewardSurface()
        first = RewardEvent(item_id="wood", amount=1, experience=10)
        second = RewardEvent(item_id="stone", amount=2, experience=20)

        surface.publish(first)
        surface.publish(second)

        self.assertIs(second, surface.current)
        self.assertEqual("stone", surface.view().item_id)

    def test_clear_is_idempotent(self) -> None:
        bus = EventBus()
        cleared: list[RewardCleared] = []
        bus.subscribe(RewardCleared, cleared.append)
        surface = RewardSurface(event_bus=bus)
        surface.publish(RewardEvent(item_id="wood", amount=1, experience=5))

        self.assertTrue(surface.clear())
        self.assertFalse(surface.clear())

        self.assertIsNone(surface.current)
        self.assertIsNone(surface.view())
        self.assertEqual(1, len(cleared))

    def test_publish_notifies_subscribers(self) -> None:
        bus = EventBus()
        seen: list[RewardPublished] = []
        bus.subscribe(RewardPublished, seen.append)
        surface = RewardSurface(event_bus=bus)

        surface.publish(RewardEvent(item_id="bone", amount=3, experience=15))

        self.assertEqual([("bone", 3, 15)], [(evt.item_id, evt.amount, evt.experience) for evt in seen])

    def test_reward_auto_clears_after_display_time(self) -> None:
        clock = ManualClock()
        surface = RewardSurface(scheduler=clock, display_ms=600)
        surface.publish(RewardEvent(item_id="wood", amount=1, experience=5))

        clock.advance(599)
        self.assertIsNotNone(surface.current)
        clock.advance(1)

        self.assertIsNone(surface.current)

    def test_newer_reward_is_not_cleared_by_older_timer(self) -> None:
        clock = ManualClock()
        surface = RewardSurface(scheduler=clock, display_ms=600)
        surface.publish(RewardEvent(item_id="wood", amount=1, experience=5))
        clock.advance(400)
        newer = RewardEvent(item_id="iron_ore", amount=1, experience=5)
        surface.publish(newer)

        clock.advance(300)
        self.assertIs(newer, surface.current)
        clock.advance(300)

        self.assertIsNone(surface.current)

    def test_without_display_time_reward_stays_until_cleared(self) -> None:
        clock = ManualClock()
        surface = RewardSurface(scheduler=clock)
        surface.publish(RewardEvent(item_id="wood", amount=1, experience=5))

        clock.advance(60_000)

        self.assertIsNotNone(surface.current)
        self.assertEqual(0, clock.pending_count())


if __name__ == "__main__":
    unittest.main()
