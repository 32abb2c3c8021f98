from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class PlayerStatsView:
    level: int
    experience: int
    currency: int
    health: int
    max_health: int
    energy: int
    max_energy: int
    damage: int
    next_level_experience: int
    experience_to_next_level: int


@dataclass(frozen=True)
class InventoryItemView:
    item_id: str
    amount: int


@dataclass(frozen=True)
class QuestSummaryView:
    id: str
    title: str
    completed: bool


@dataclass(frozen=True)
class QuestLogView:
    active: Tuple[QuestSummaryView, ...] = ()
    completed: Tuple[QuestSummaryView, ...] = ()
    failed: Tuple[QuestSummaryView, ...] = ()


@dataclass(frozen=True)
class DialogueChoiceView:
    index: int
    text: str
    available: bool
    completes_quest: bool


@dataclass(frozen=True)
class DialogueView:
    quest_id: str
    quest_title: str
    dialogue_index: int
    speaker: str
    text: str
    choices: Tuple[DialogueChoiceView, ...] = ()


@dataclass(frozen=True)
class EnemyView:
    id: str
    type: str
    name: str
    level: int
    x: float
    y: float
    z: float
    health: int
    max_health: int
    scale: float
    dying: bool


@dataclass(frozen=True)
class RewardView:
    item_id: str
    amount: int
    experience: int
