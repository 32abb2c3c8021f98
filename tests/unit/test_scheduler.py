import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from worldsmith.application.services.scheduler import ManualClock


class ManualClockTests(unittest.TestCase):
    def test_call_later_runs_once_when_due(self) -> None:
        clock = ManualClock()
        seen: list[int] = []
        clock.call_later(500, lambda: seen.append(clock.now_ms()))

        self.assertEqual(0, clock.advance(499))
        self.assertEqual(1, clock.advance(1))
        self.assertEqual(0, clock.advance(5000))

        self.assertEqual([500], seen)
        self.assertEqual(5500, clock.now_ms())

    def test_tasks_run_in_due_then_scheduling_order(self) -> None:
        clock = ManualClock()
        seen: list[str] = []
        clock.call_later(300, lambda: seen.append("late"))
        clock.call_later(100, lambda: seen.append("early-a"))
        clock.call_later(100, lambda: seen.append("early-b"))

        clock.advance(1000)

        self.assertEqual(["early-a", "early-b", "late"], seen)

    def test_cancelled_task_never_runs(self) -> None:
        clock = ManualClock()
        seen: list[str] = []
        task = clock.call_later(100, lambda: seen.append("ran"))

        self.assertTrue(task.cancel())
        self.assertFalse(task.cancel())
        clock.advance(200)

        self.assertEqual([], seen)
        self.assertEqual(0, clock.pending_count())

    def test_call_every_repeats_until_cancelled(self) -> None:
        clock = ManualClock()
        seen: list[int] = []
        task = clock.call_every(1000, lambda: seen.append(clock.now_ms()))

        clock.advance(3500)
        task.cancel()
        clock.advance(5000)

        self.assertEqual([1000, 2000, 3000], seen)
        self.assertEqual(3, task.runs)

    def test_call_every_rejects_non_positive_interval(self) -> None:
        clock = ManualClock()

        with self.assertRaises(ValueError):
            clock.call_every(0, lambda: None)

    def test_task_scheduled_from_callback_uses_callback_time(self) -> None:
        clock = ManualClock()
        seen: list[int] = []
        clock.call_later(100, lambda: clock.call_later(50, lambda: seen.append(clock.now_ms())))

        clock.advance(1000)

        self.assertEqual([150], seen)

    def test_failing_task_is_logged_and_isolated(self) -> None:
        clock = ManualClock()
        seen: list[str] = []

        def _broken() -> None:
            raise RuntimeError("boom")

        clock.call_later(10, _broken, name="broken")
        clock.call_later(20, lambda: seen.append("after"))

        with self.assertLogs("worldsmith.application.services.scheduler", level="ERROR"):
            executed = clock.advance(100)

        self.assertEqual(2, executed)
        self.assertEqual(["after"], seen)


if __name__ == "__main__":
    unittest.main()
