from dataclasses import dataclass, field
from typing import Mapping


@dataclass
class PlayerStatsChanged:
    changed_fields: tuple[str, ...]
    level: int
    experience: int


@dataclass
class LevelUpApplied:
    from_level: int
    to_level: int
    health_gain: int
    energy_gain: int
    damage_gain: int


@dataclass
class InventoryChanged:
    item_id: str
    delta: int
    amount_after: int


@dataclass
class QuestStarted:
    quest_id: str
    restarted: bool = False


@dataclass
class DialogueAdvanced:
    quest_id: str
    from_index: int
    to_index: int


@dataclass
class QuestCompleted:
    quest_id: str
    reward_experience: int
    reward_currency: int


@dataclass
class QuestFailed:
    quest_id: str
    reason: str = "explicit"


@dataclass
class QuestActionRequested:
    quest_id: str
    kind: str
    params: Mapping[str, object] = field(default_factory=dict)


@dataclass
class EnemySpawned:
    enemy_id: str
    enemy_type: str
    level: int
    x: float
    z: float


@dataclass
class EnemyDefeated:
    enemy_id: str
    enemy_type: str
    experience: int
    dropped_item_ids: tuple[str, ...] = ()


@dataclass
class EnemyRemoved:
    enemy_id: str
    reason: str


@dataclass
class RewardPublished:
    item_id: str
    amount: int
    experience: int


@dataclass
class RewardCleared:
    item_id: str
