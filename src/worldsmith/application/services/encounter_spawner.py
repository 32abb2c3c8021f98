from __future__ import annotations

import itertools
import logging
import math
import random
from dataclasses import dataclass
from typing import Callable, Mapping

from worldsmith.application.dtos import EnemyView
from worldsmith.application.services.balance_tables import (
    DEATH_ANIMATION_MS,
    ENEMY_HEALTH_MULTIPLIER,
    ENEMY_LEVEL_SPREAD,
    MAX_ENEMIES,
    MAX_SPAWN_ATTEMPTS,
    MIN_ENEMY_DISTANCE,
    MIN_NPC_DISTANCE,
    SPAWN_INTERVAL_MS,
    SPAWN_RADIUS,
    enemy_level_scale,
    scaled_enemy_level,
)
from worldsmith.application.services.economy_ledger import EconomyLedger
from worldsmith.application.services.event_bus import EventBus
from worldsmith.application.services.reward_surface import RewardSurface
from worldsmith.application.services.scheduler import ScheduledTask, Scheduler
from worldsmith.domain.events import EnemyDefeated, EnemyRemoved, EnemySpawned
from worldsmith.domain.models.enemy import Enemy, EnemyTemplate, LootEntry, Vector3
from worldsmith.domain.models.reward import RewardEvent
from worldsmith.domain.repositories import ReservedPositionRepository
from worldsmith.domain.services.enemy_catalog import ENEMY_CATALOG


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpawnSettings:
    max_enemies: int = MAX_ENEMIES
    spawn_radius: float = SPAWN_RADIUS
    min_npc_distance: float = MIN_NPC_DISTANCE
    min_enemy_distance: float = MIN_ENEMY_DISTANCE
    max_attempts: int = MAX_SPAWN_ATTEMPTS
    spawn_interval_ms: int = SPAWN_INTERVAL_MS
    death_animation_ms: int = DEATH_ANIMATION_MS
    level_spread: int = ENEMY_LEVEL_SPREAD


class EncounterSpawner:
    """Wandering enemy lifecycle: spawn, damage, death, loot.

    Spawn positions are found by rejection sampling inside a disc around the
    origin. A cycle that cannot find a clear spot within ``max_attempts``
    simply produces nothing.
    """

    def __init__(
        self,
        ledger: EconomyLedger,
        reward_surface: RewardSurface,
        scheduler: Scheduler,
        *,
        event_bus: EventBus | None = None,
        reserved_positions: ReservedPositionRepository | None = None,
        catalog: Mapping[str, EnemyTemplate] | None = None,
        settings: SpawnSettings | None = None,
        rng: random.Random | None = None,
        loot_rng: random.Random | None = None,
        id_factory: Callable[[str], str] | None = None,
    ) -> None:
        self.ledger = ledger
        self.reward_surface = reward_surface
        self.scheduler = scheduler
        self.event_bus = event_bus
        self.reserved_positions = reserved_positions
        self.catalog = dict(catalog if catalog is not None else ENEMY_CATALOG)
        self.settings = settings or SpawnSettings()
        self.rng = rng or random.Random()
        self.loot_rng = loot_rng or self.rng
        self._enemies: dict[str, Enemy] = {}
        self._pending_removals: dict[str, ScheduledTask] = {}
        self._spawn_task: ScheduledTask | None = None
        counter = itertools.count(1)
        self._id_factory = id_factory or (lambda enemy_type: f"{enemy_type}-{next(counter)}")

    def _publish(self, event: object) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)

    # -- queries -----------------------------------------------------------

    @property
    def enemies(self) -> list[Enemy]:
        return list(self._enemies.values())

    def get(self, enemy_id: str) -> Enemy | None:
        return self._enemies.get(enemy_id)

    def snapshot(self) -> tuple[EnemyView, ...]:
        return tuple(
            EnemyView(
                id=enemy.id,
                type=enemy.type,
                name=enemy.name,
                level=enemy.level,
                x=enemy.position.x,
                y=enemy.position.y,
                z=enemy.position.z,
                health=enemy.health,
                max_health=enemy.max_health,
                scale=enemy.scale,
                dying=enemy.dying,
            )
            for enemy in self._enemies.values()
        )

    # -- spawning ------------------------------------------------------------

    def sample_position(self) -> Vector3:
        # sqrt keeps the density uniform over the disc area.
        radius = self.settings.spawn_radius * math.sqrt(self.rng.random())
        angle = self.rng.uniform(0.0, 2.0 * math.pi)
        return Vector3(x=radius * math.cos(angle), y=0.0, z=radius * math.sin(angle))

    def is_position_clear(self, position: Vector3, reserved: list[Vector3]) -> bool:
        for npc in reserved:
            if position.ground_distance_to(npc) <= self.settings.min_npc_distance:
                return False
        for enemy in self._enemies.values():
            if position.ground_distance_to(enemy.position) <= self.settings.min_enemy_distance:
                return False
        return True

    def find_spawn_position(self) -> Vector3 | None:
        reserved = self.reserved_positions.list_reserved() if self.reserved_positions is not None else []
        for _ in range(max(0, int(self.settings.max_attempts))):
            candidate = self.sample_position()
            if self.is_position_clear(candidate, reserved):
                return candidate
        return None

    def spawn_enemy(self, enemy_type: str | None = None) -> Enemy | None:
        if len(self._enemies) >= self.settings.max_enemies:
            return None
        if not self.catalog:
            return None

        if enemy_type is None:
            enemy_type = self.rng.choice(sorted(self.catalog.keys()))
        template = self.catalog.get(enemy_type)
        if template is None:
            logger.debug("Unknown enemy type %s", enemy_type)
            return None

        position = self.find_spawn_position()
        if position is None:
            logger.debug("No clear spawn position after %s attempts", self.settings.max_attempts)
            return None

        enemy = self._instantiate(template, position)
        self._enemies[enemy.id] = enemy
        logger.debug("Spawned %s at (%.1f, %.1f)", enemy.id, position.x, position.z)
        self._publish(
            EnemySpawned(enemy_id=enemy.id, enemy_type=enemy.type, level=enemy.level, x=position.x, z=position.z)
        )
        return enemy

    def _instantiate(self, template: EnemyTemplate, position: Vector3) -> Enemy:
        spread = max(0, int(self.settings.level_spread))
        offset = self.rng.randint(-spread, spread) if spread else 0
        level = scaled_enemy_level(self.ledger.stats.level, offset)
        scale = enemy_level_scale(level, template.level)
        health = max(1, int(template.health * scale * ENEMY_HEALTH_MULTIPLIER))
        return Enemy(
            id=self._id_factory(template.type),
            type=template.type,
            name=template.name,
            level=level,
            position=position,
            health=health,
            max_health=health,
            damage=max(1, int(template.damage * scale)),
            experience=max(0, int(template.experience * scale)),
            currency=max(0, int(template.currency * scale)),
            loot=tuple(template.loot),
            scale=template.scale,
        )

    def start_spawning(self) -> bool:
        if self._spawn_task is not None:
            return False
        self._spawn_task = self.scheduler.call_every(
            self.settings.spawn_interval_ms,
            self.spawn_enemy,
            name="encounter:spawn",
        )
        return True

    def stop_spawning(self) -> bool:
        if self._spawn_task is None:
            return False
        self._spawn_task.cancel()
        self._spawn_task = None
        return True

    @property
    def is_spawning(self) -> bool:
        return self._spawn_task is not None

    # -- combat --------------------------------------------------------------

    def damage_enemy(self, enemy_id: str, amount: int) -> bool:
        enemy = self._enemies.get(enemy_id)
        if enemy is None or enemy.dying:
            return False
        try:
            damage = int(amount)
        except (TypeError, ValueError):
            return False
        if damage <= 0:
            return False

        enemy.health -= damage
        if enemy.health <= 0:
            self._begin_death(enemy)
        return True

    def _roll_loot(self, loot: tuple[LootEntry, ...]) -> list[LootEntry]:
        drops: list[LootEntry] = []
        for entry in loot:
            if self.loot_rng.random() < float(entry.drop_chance):
                drops.append(entry)
        return drops

    def _begin_death(self, enemy: Enemy) -> None:
        enemy.dying = True
        drops = self._roll_loot(enemy.loot)
        for entry in drops:
            self.ledger.add_item(entry.item_id, entry.amount)
        if enemy.currency:
            self.ledger.grant_currency(enemy.currency)
        self.ledger.grant_experience(enemy.experience)
        logger.info("%s defeated: +%s xp, %s drops", enemy.id, enemy.experience, len(drops))

        self._pending_removals[enemy.id] = self.scheduler.call_later(
            self.settings.death_animation_ms,
            lambda: self._finish_death(enemy, drops),
            name=f"encounter:remove:{enemy.id}",
        )
        self._publish(
            EnemyDefeated(
                enemy_id=enemy.id,
                enemy_type=enemy.type,
                experience=enemy.experience,
                dropped_item_ids=tuple(entry.item_id for entry in drops),
            )
        )

    def _finish_death(self, enemy: Enemy, drops: list[LootEntry]) -> None:
        # Removed through another path (despawn, clear) before the delay ran out.
        if self._enemies.get(enemy.id) is not enemy or not enemy.dying:
            return
        self._pending_removals.pop(enemy.id, None)
        del self._enemies[enemy.id]
        enemy.dying = False
        self._publish(EnemyRemoved(enemy_id=enemy.id, reason="defeated"))
        if drops:
            first = drops[0]
            self.reward_surface.publish(
                RewardEvent(item_id=first.item_id, amount=first.amount, experience=enemy.experience)
            )

    def despawn(self, enemy_id: str) -> bool:
        enemy = self._enemies.pop(enemy_id, None)
        if enemy is None:
            return False
        pending = self._pending_removals.pop(enemy_id, None)
        if pending is not None:
            pending.cancel()
        enemy.dying = False
        self._publish(EnemyRemoved(enemy_id=enemy_id, reason="despawned"))
        return True

    def clear(self) -> int:
        removed = 0
        for enemy_id in list(self._enemies.keys()):
            if self.despawn(enemy_id):
                removed += 1
        return removed
