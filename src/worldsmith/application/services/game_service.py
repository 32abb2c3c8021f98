from __future__ import annotations

from typing import Any, Callable, Type

from worldsmith.application.dtos import (
    DialogueView,
    EnemyView,
    InventoryItemView,
    PlayerStatsView,
    QuestLogView,
    RewardView,
)
from worldsmith.application.services.economy_ledger import EconomyLedger
from worldsmith.application.services.encounter_spawner import EncounterSpawner
from worldsmith.application.services.event_bus import EventBus, Subscription
from worldsmith.application.services.quest_registry import QuestRegistry
from worldsmith.application.services.reward_surface import RewardSurface
from worldsmith.application.services.scheduler import ManualClock
from worldsmith.domain.models.quest import Quest
from worldsmith.domain.repositories import QuestDefinitionRepository, ReservedPositionRepository


class GameService:
    """Command/query surface the rendering and input layers talk to.

    Queries return frozen views; commands return booleans (or the spawned
    enemy's view) and never raise for rejected requests.
    """

    def __init__(
        self,
        ledger: EconomyLedger,
        quest_registry: QuestRegistry,
        spawner: EncounterSpawner,
        reward_surface: RewardSurface,
        clock: ManualClock,
        event_bus: EventBus,
        quest_repo: QuestDefinitionRepository | None = None,
        scene_repo: ReservedPositionRepository | None = None,
    ) -> None:
        self.ledger = ledger
        self.quest_registry = quest_registry
        self.spawner = spawner
        self.reward_surface = reward_surface
        self.clock = clock
        self.event_bus = event_bus
        self.quest_repo = quest_repo
        self.scene_repo = scene_repo

    # -- queries -------------------------------------------------------------

    def player_stats(self) -> PlayerStatsView:
        return self.ledger.stats_view()

    def inventory(self) -> tuple[InventoryItemView, ...]:
        return self.ledger.inventory_view()

    def quest_log(self) -> QuestLogView:
        return self.quest_registry.snapshot()

    def enemies(self) -> tuple[EnemyView, ...]:
        return self.spawner.snapshot()

    def current_reward(self) -> RewardView | None:
        return self.reward_surface.view()

    def current_dialogue(self) -> DialogueView | None:
        return self.quest_registry.current_dialogue()

    def available_quests(self) -> list[Quest]:
        if self.quest_repo is None:
            return []
        return [quest for quest in self.quest_repo.list_all() if self.quest_registry.can_accept(quest)]

    def subscribe(self, event_type: Type[object], handler: Callable[[Any], None], *, priority: int = 100) -> Subscription:
        return self.event_bus.subscribe(event_type, handler, priority=priority)

    # -- commands ------------------------------------------------------------

    def start_quest(self, quest: Quest | str, *, allow_repeat: bool = False) -> bool:
        if isinstance(quest, Quest):
            return self.quest_registry.start_quest(quest, allow_repeat=allow_repeat)
        return self.quest_registry.start_quest_by_id(str(quest), allow_repeat=allow_repeat)

    def advance_dialogue(self, choice_index: int) -> bool:
        return self.quest_registry.advance_dialogue(choice_index)

    def complete_quest(self, quest_id: str) -> bool:
        return self.quest_registry.complete_quest(quest_id)

    def fail_quest(self, quest_id: str) -> bool:
        return self.quest_registry.fail_quest(quest_id)

    def add_item(self, item_id: str, amount: int = 1) -> bool:
        return self.ledger.add_item(item_id, amount)

    def remove_item(self, item_id: str, amount: int = 1) -> bool:
        return self.ledger.remove_item(item_id, amount)

    def update_stats(self, **updates: Any) -> bool:
        return self.ledger.update_stats(updates)

    def spawn_enemy(self) -> EnemyView | None:
        enemy = self.spawner.spawn_enemy()
        if enemy is None:
            return None
        for view in self.spawner.snapshot():
            if view.id == enemy.id:
                return view
        return None

    def damage_enemy(self, enemy_id: str, amount: int) -> bool:
        return self.spawner.damage_enemy(enemy_id, amount)

    def clear_reward(self) -> bool:
        return self.reward_surface.clear()

    def advance_time(self, delta_ms: int) -> int:
        return self.clock.advance(delta_ms)

    def start_spawning(self) -> bool:
        return self.spawner.start_spawning()

    def stop_spawning(self) -> bool:
        return self.spawner.stop_spawning()

    def report_player_position(self, x: float, y: float, z: float) -> list[str]:
        return self.quest_registry.report_player_position(x, y, z)
