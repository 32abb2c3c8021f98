import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from worldsmith.application.services.economy_ledger import EconomyLedger
from worldsmith.application.services.quest_registry import QuestRegistry
from worldsmith.domain.models.quest import Quest, QuestRewards, QuestStatus
from worldsmith.infrastructure.inmemory.inmemory_quest_repo import InMemoryQuestDefinitionRepository
from worldsmith.infrastructure.state_snapshot import (
    SNAPSHOT_VERSION,
    decode_state,
    dumps_state,
    encode_state,
    loads_state,
)


def _definitions() -> InMemoryQuestDefinitionRepository:
    return InMemoryQuestDefinitionRepository(
        [
            Quest(id="alpha", title="Alpha", rewards=QuestRewards(experience=200, currency=15)),
            Quest(id="beta", title="Beta"),
            Quest(id="gamma", title="Gamma"),
        ]
    )


class StateSnapshotTests(unittest.TestCase):
    def setUp(self) -> None:
        self.definitions = _definitions()
        self.ledger = EconomyLedger()
        self.registry = QuestRegistry(self.ledger, definition_repo=self.definitions)
        for quest_id in ("alpha", "beta", "gamma"):
            self.registry.start_quest_by_id(quest_id)
        self.registry.complete_quest("alpha")
        self.registry.fail_quest("beta")
        self.ledger.add_item("wood", 4)

    def test_encode_references_quests_by_id(self) -> None:
        payload = encode_state(self.ledger, self.registry)

        self.assertEqual(SNAPSHOT_VERSION, payload["version"])
        self.assertEqual({"active": ["gamma"], "completed": ["alpha"], "failed": ["beta"]}, payload["quest_log"])
        self.assertEqual({"wood": 4}, payload["inventory"])
        self.assertEqual(2, payload["player_stats"]["level"])

    def test_text_snapshot_restores_into_fresh_engine(self) -> None:
        text = dumps_state(self.ledger, self.registry)
        ledger = EconomyLedger()
        registry = QuestRegistry(ledger)

        missing = loads_state(text, ledger, registry, self.definitions)

        self.assertEqual([], missing)
        self.assertEqual(self.ledger.stats, ledger.stats)
        self.assertEqual(4, ledger.get_item_count("wood"))
        self.assertEqual(QuestStatus.COMPLETED, registry.status_of("alpha"))
        self.assertTrue(registry.quest_log.completed[0].completed)
        self.assertEqual(QuestStatus.FAILED, registry.status_of("beta"))
        self.assertEqual(QuestStatus.ACTIVE, registry.status_of("gamma"))
        self.assertIsNone(registry.displayed())

    def test_unknown_quest_ids_are_reported(self) -> None:
        payload = encode_state(self.ledger, self.registry)
        payload["quest_log"]["active"].append("retired")

        missing = decode_state(payload, EconomyLedger(), QuestRegistry(EconomyLedger()), self.definitions)

        self.assertEqual(["retired"], missing)

    def test_quest_in_two_buckets_keeps_first(self) -> None:
        payload = encode_state(self.ledger, self.registry)
        payload["quest_log"]["failed"].append("gamma")
        registry = QuestRegistry(EconomyLedger())

        with self.assertLogs("worldsmith.infrastructure.state_snapshot", level="WARNING"):
            decode_state(payload, registry.ledger, registry, self.definitions)

        self.assertEqual(QuestStatus.ACTIVE, registry.status_of("gamma"))
        self.assertEqual(["beta"], [quest.id for quest in registry.quest_log.failed])

    def test_unsupported_version_is_rejected(self) -> None:
        payload = encode_state(self.ledger, self.registry)
        payload["version"] = 99

        with self.assertRaises(ValueError):
            decode_state(payload, EconomyLedger(), QuestRegistry(EconomyLedger()), self.definitions)


if __name__ == "__main__":
    unittest.main()
