from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, Union

from worldsmith.domain.models.inventory import ItemStack


class QuestStatus(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class QuestActionKind(str, Enum):
    COMPLETE = "complete"
    FAIL = "fail"
    UPDATE_STAGE = "update_stage"
    GIVE_ITEM = "give_item"
    REMOVE_ITEM = "remove_item"
    TELEPORT = "teleport"
    SPAWN_NPC = "spawn_npc"


# Actions the engine cannot perform itself; they are handed to the scene.
SCENE_ACTION_KINDS = frozenset({QuestActionKind.TELEPORT, QuestActionKind.SPAWN_NPC})


@dataclass(frozen=True)
class QuestRequirements:
    level: int | None = None
    energy: int | None = None
    currency: int | None = None
    items: tuple[ItemStack, ...] = ()


@dataclass(frozen=True)
class QuestRewards:
    experience: int = 0
    currency: int = 0
    energy: int = 0
    items: tuple[ItemStack, ...] = ()


@dataclass(frozen=True)
class QuestAction:
    kind: QuestActionKind
    params: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class GotoDialogue:
    index: int


@dataclass(frozen=True)
class CompleteQuest:
    pass


ChoiceOutcome = Union[GotoDialogue, CompleteQuest]


@dataclass(frozen=True)
class DialogueChoice:
    text: str
    outcome: ChoiceOutcome = field(default_factory=CompleteQuest)
    requirements: QuestRequirements | None = None
    action: QuestAction | None = None


@dataclass(frozen=True)
class DialogueNode:
    id: int
    speaker: str
    text: str
    choices: tuple[DialogueChoice, ...] = ()


@dataclass(frozen=True)
class ItemsCondition:
    items: tuple[ItemStack, ...]


@dataclass(frozen=True)
class EnemyDefeatCondition:
    # Empty means any enemy type counts.
    enemy_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class LocationCondition:
    x: float
    y: float
    z: float
    radius: float


@dataclass(frozen=True)
class ManualCompletion:
    pass


CompletionCondition = Union[ItemsCondition, EnemyDefeatCondition, LocationCondition, ManualCompletion]


@dataclass(frozen=True)
class Quest:
    id: str
    title: str
    description: str = ""
    requirements: QuestRequirements = field(default_factory=QuestRequirements)
    rewards: QuestRewards = field(default_factory=QuestRewards)
    dialogues: tuple[DialogueNode, ...] = ()
    completion: CompletionCondition = field(default_factory=ManualCompletion)
    completed: bool = False

    def dialogue_at(self, index: int) -> DialogueNode | None:
        if 0 <= int(index) < len(self.dialogues):
            return self.dialogues[int(index)]
        return None


@dataclass(frozen=True)
class CompletionContext:
    """What the world looks like when a completion condition is checked."""

    has_item: Callable[[str, int], bool]
    defeated_enemy_types: tuple[str, ...] = ()
    player_position: tuple[float, float, float] | None = None


def is_completion_met(condition: CompletionCondition, context: CompletionContext) -> bool:
    if isinstance(condition, ItemsCondition):
        if not condition.items:
            return False
        return all(context.has_item(stack.item_id, stack.amount) for stack in condition.items)

    if isinstance(condition, EnemyDefeatCondition):
        if not context.defeated_enemy_types:
            return False
        if not condition.enemy_types:
            return True
        wanted = set(condition.enemy_types)
        return any(enemy_type in wanted for enemy_type in context.defeated_enemy_types)

    if isinstance(condition, LocationCondition):
        if context.player_position is None:
            return False
        px, py, pz = context.player_position
        distance = math.sqrt((px - condition.x) ** 2 + (py - condition.y) ** 2 + (pz - condition.z) ** 2)
        return distance <= float(condition.radius)

    if isinstance(condition, ManualCompletion):
        return False

    raise TypeError(f"Unsupported completion condition: {condition!r}")


@dataclass
class QuestLog:
    """Three disjoint ordered collections of quests."""

    active: list[Quest] = field(default_factory=list)
    completed: list[Quest] = field(default_factory=list)
    failed: list[Quest] = field(default_factory=list)

    def status_of(self, quest_id: str) -> QuestStatus:
        if self._find(self.active, quest_id) is not None:
            return QuestStatus.ACTIVE
        if self._find(self.completed, quest_id) is not None:
            return QuestStatus.COMPLETED
        if self._find(self.failed, quest_id) is not None:
            return QuestStatus.FAILED
        return QuestStatus.NOT_STARTED

    def find_active(self, quest_id: str) -> Quest | None:
        return self._find(self.active, quest_id)

    def take_active(self, quest_id: str) -> Quest | None:
        quest = self._find(self.active, quest_id)
        if quest is not None:
            self.active = [row for row in self.active if row.id != quest_id]
        return quest

    def forget_terminal(self, quest_id: str) -> None:
        self.completed = [row for row in self.completed if row.id != quest_id]
        self.failed = [row for row in self.failed if row.id != quest_id]

    @staticmethod
    def _find(rows: list[Quest], quest_id: str) -> Quest | None:
        for row in rows:
            if row.id == quest_id:
                return row
        return None
