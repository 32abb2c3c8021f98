from __future__ import annotations

from typing import Iterable, List, Optional

from worldsmith.domain.models.quest import Quest
from worldsmith.domain.repositories import QuestDefinitionRepository


class InMemoryQuestDefinitionRepository(QuestDefinitionRepository):
    def __init__(self, quests: Iterable[Quest] | None = None) -> None:
        self._quests: dict[str, Quest] = {}
        for quest in quests or ():
            self.save(quest)

    def get(self, quest_id: str) -> Optional[Quest]:
        return self._quests.get(str(quest_id))

    def list_all(self) -> List[Quest]:
        return list(self._quests.values())

    def save(self, quest: Quest) -> None:
        self._quests[quest.id] = quest
