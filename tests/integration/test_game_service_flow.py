import os
import sys
import tempfile
from pathlib import Path
import unittest
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from worldsmith.bootstrap import create_game_service, spawn_settings_from_env
from worldsmith.domain.events import QuestCompleted
from worldsmith.domain.models.enemy import Vector3
from worldsmith.domain.services.enemy_catalog import ENEMY_CATALOG
from worldsmith.infrastructure.quest_content import QuestContentError


_NPCS = (Vector3(0.0, 0.0, 0.0), Vector3(6.0, 0.0, -4.0))


class GameServiceFlowTests(unittest.TestCase):
    def setUp(self) -> None:
        with mock.patch.dict(os.environ, {"WORLDSMITH_SEED": "42"}):
            self.service = create_game_service(reserved_positions=_NPCS)

    def test_bundled_quests_are_offered_by_requirements(self) -> None:
        offered = {quest.id for quest in self.service.available_quests()}

        self.assertIn("lumber_for_the_mill", offered)
        self.assertIn("goblin_trouble", offered)
        self.assertNotIn("the_old_watchtower", offered)

    def test_gathering_quest_completes_when_items_arrive(self) -> None:
        completed: list[QuestCompleted] = []
        self.service.subscribe(QuestCompleted, completed.append)
        self.assertTrue(self.service.start_quest("lumber_for_the_mill"))
        self.service.advance_dialogue(0)

        self.service.add_item("wood", 5)

        log = self.service.quest_log()
        self.assertEqual(["lumber_for_the_mill"], [row.id for row in log.completed])
        self.assertEqual(100, self.service.player_stats().experience)
        self.assertEqual(50, self.service.player_stats().currency)
        inventory = {row.item_id: row.amount for row in self.service.inventory()}
        self.assertEqual(2, inventory["bread"])
        self.assertEqual(["lumber_for_the_mill"], [evt.quest_id for evt in completed])

    def test_hunting_quest_completes_on_matching_kill(self) -> None:
        self.service.start_quest("goblin_trouble")
        enemy = self.service.spawner.spawn_enemy("goblin")

        self.assertTrue(self.service.damage_enemy(enemy.id, 10_000))

        self.assertEqual(["goblin_trouble"], [row.id for row in self.service.quest_log().completed])
        self.assertEqual(80 + enemy.experience, self.service.player_stats().experience)
        self.assertTrue(self.service.enemies()[0].dying)

        self.service.advance_time(1000)

        self.assertEqual((), self.service.enemies())
        reward = self.service.current_reward()
        if reward is not None:
            self.assertIn(reward.item_id, {entry.item_id for entry in ENEMY_CATALOG["goblin"].loot})
            self.service.advance_time(600)
            self.assertIsNone(self.service.current_reward())

    def test_location_quest_after_leveling(self) -> None:
        self.assertFalse(self.service.start_quest("the_old_watchtower"))
        self.service.update_stats(experience=125)

        self.assertTrue(self.service.start_quest("the_old_watchtower"))
        self.assertTrue(self.service.advance_dialogue(0))
        self.assertEqual([], self.service.report_player_position(0.0, 0.0, 0.0))

        self.assertEqual(["the_old_watchtower"], self.service.report_player_position(41.0, 0.0, -33.0))

    def test_refusing_dialogue_choice_fails_quest(self) -> None:
        self.service.start_quest("lumber_for_the_mill")

        self.assertTrue(self.service.advance_dialogue(1))

        self.assertEqual(["lumber_for_the_mill"], [row.id for row in self.service.quest_log().failed])
        self.assertIsNone(self.service.current_dialogue())

    def test_manual_quest_pays_costs_on_completion(self) -> None:
        self.service.update_stats(currency=25)
        self.service.add_item("iron_ore", 2)
        self.assertTrue(self.service.start_quest("merchants_favor"))

        self.assertTrue(self.service.advance_dialogue(0))

        stats = self.service.player_stats()
        self.assertEqual(25 - 10 + 25, stats.currency)
        inventory = {row.item_id: row.amount for row in self.service.inventory()}
        self.assertNotIn("iron_ore", inventory)
        self.assertEqual(1, inventory["sword"])

    def test_spawn_cycle_fills_to_cap(self) -> None:
        self.service.start_spawning()

        self.service.advance_time(60_000)

        enemies = self.service.enemies()
        self.assertEqual(5, len(enemies))
        for enemy in enemies:
            for npc in _NPCS:
                self.assertGreater(Vector3(enemy.x, enemy.y, enemy.z).ground_distance_to(npc), 10.0)


class BootstrapConfigTests(unittest.TestCase):
    def test_same_seed_reproduces_spawns(self) -> None:
        with mock.patch.dict(os.environ, {"WORLDSMITH_SEED": "7"}):
            first = create_game_service(quests=[])
            second = create_game_service(quests=[])
        for service in (first, second):
            for _ in range(3):
                service.spawn_enemy()

        self.assertEqual(first.enemies(), second.enemies())

    def test_spawn_settings_read_environment(self) -> None:
        with mock.patch.dict(
            os.environ,
            {"WORLDSMITH_MAX_ENEMIES": "2", "WORLDSMITH_SPAWN_RADIUS": "12.5", "WORLDSMITH_SPAWN_ATTEMPTS": "many"},
        ):
            settings = spawn_settings_from_env()

        self.assertEqual(2, settings.max_enemies)
        self.assertEqual(12.5, settings.spawn_radius)
        self.assertEqual(10, settings.max_attempts)

    def test_non_positive_spawn_interval_falls_back_to_default(self) -> None:
        for raw in ("0", "-250"):
            with mock.patch.dict(os.environ, {"WORLDSMITH_SPAWN_INTERVAL_MS": raw}):
                with self.assertLogs("worldsmith.bootstrap", level="WARNING"):
                    service = create_game_service(quests=[])

            self.assertEqual(5000, service.spawner.settings.spawn_interval_ms)
            self.assertTrue(service.start_spawning())

    def test_missing_quest_file_starts_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, mock.patch.dict(
            os.environ, {"WORLDSMITH_QUEST_CONTENT": str(Path(tmp) / "absent.json")}
        ):
            service = create_game_service()

        self.assertEqual([], service.available_quests())

    def test_invalid_quest_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "quests.json"
            path.write_text('{"quests": [{"id": "", "title": ""}]}', encoding="utf-8")
            with mock.patch.dict(os.environ, {"WORLDSMITH_QUEST_CONTENT": str(path)}):
                with self.assertRaises(QuestContentError):
                    create_game_service()


if __name__ == "__main__":
    unittest.main()
