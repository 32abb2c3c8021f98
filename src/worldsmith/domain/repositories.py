from abc import ABC, abstractmethod
from typing import List, Optional

from worldsmith.domain.models.enemy import Vector3
from worldsmith.domain.models.quest import Quest


class QuestDefinitionRepository(ABC):
    @abstractmethod
    def get(self, quest_id: str) -> Optional[Quest]:
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> List[Quest]:
        raise NotImplementedError

    @abstractmethod
    def save(self, quest: Quest) -> None:
        raise NotImplementedError


class ReservedPositionRepository(ABC):
    """Read-only view of scene positions (NPCs) that spawns must keep clear of."""

    @abstractmethod
    def list_reserved(self) -> List[Vector3]:
        raise NotImplementedError
