import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from worldsmith.application.services.seed_policy import derive_rng, derive_seed


class SeedPolicyTests(unittest.TestCase):
    def test_same_context_same_seed(self) -> None:
        context = {"session_seed": 9, "enemy_type": "goblin", "origin": {"x": 0, "z": 0}}
        self.assertEqual(derive_seed("encounter.spawn", context), derive_seed("encounter.spawn", context))

    def test_context_key_order_does_not_change_seed(self) -> None:
        context_a = {"a": 1, "b": {"x": 2, "y": 3}}
        context_b = {"b": {"y": 3, "x": 2}, "a": 1}
        self.assertEqual(derive_seed("encounter.loot", context_a), derive_seed("encounter.loot", context_b))

    def test_namespace_changes_seed(self) -> None:
        context = {"value": 10}
        self.assertNotEqual(derive_seed("encounter.spawn", context), derive_seed("encounter.loot", context))

    def test_unordered_set_values_produce_stable_seed(self) -> None:
        context_a = {"types": {"goblin", "wolf", "orc"}}
        context_b = {"types": {"orc", "goblin", "wolf"}}
        self.assertEqual(derive_seed("encounter.spawn", context_a), derive_seed("encounter.spawn", context_b))

    def test_derive_rng_is_deterministic_for_same_session_seed(self) -> None:
        rng_a = derive_rng("encounter.spawn", 42)
        rng_b = derive_rng("encounter.spawn", 42)
        self.assertEqual([rng_a.randint(1, 1000) for _ in range(5)], [rng_b.randint(1, 1000) for _ in range(5)])

    def test_derive_rng_streams_differ_by_namespace(self) -> None:
        rng_a = derive_rng("encounter.spawn", 42)
        rng_b = derive_rng("encounter.loot", 42)
        self.assertNotEqual([rng_a.random() for _ in range(5)], [rng_b.random() for _ in range(5)])

    def test_derive_rng_without_seed_still_returns_generator(self) -> None:
        rng = derive_rng("encounter.spawn", None)
        self.assertTrue(0.0 <= rng.random() < 1.0)


if __name__ == "__main__":
    unittest.main()
