import logging
import os
from pathlib import Path
from typing import Iterable

from worldsmith.application.services.balance_tables import (
    DEATH_ANIMATION_MS,
    MAX_ENEMIES,
    MAX_SPAWN_ATTEMPTS,
    MIN_ENEMY_DISTANCE,
    MIN_NPC_DISTANCE,
    REWARD_DISPLAY_MS,
    SPAWN_INTERVAL_MS,
    SPAWN_RADIUS,
)
from worldsmith.application.services.economy_ledger import EconomyLedger
from worldsmith.application.services.encounter_spawner import EncounterSpawner, SpawnSettings
from worldsmith.application.services.event_bus import EventBus
from worldsmith.application.services.game_service import GameService
from worldsmith.application.services.quest_registry import QuestRegistry
from worldsmith.application.services.reward_surface import RewardSurface
from worldsmith.application.services.scheduler import ManualClock
from worldsmith.application.services.seed_policy import derive_rng
from worldsmith.domain.models.enemy import Vector3
from worldsmith.domain.models.quest import Quest
from worldsmith.infrastructure.inmemory.inmemory_quest_repo import InMemoryQuestDefinitionRepository
from worldsmith.infrastructure.inmemory.inmemory_scene_repo import InMemoryReservedPositionRepository
from worldsmith.infrastructure.quest_content import QuestContentError, default_content_path, load_quest_file


logger = logging.getLogger(__name__)


def _env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return default
    if minimum is not None and value < minimum:
        logger.warning("Ignoring %s=%s below minimum %s", name, value, minimum)
        return default
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, raw)
        return default


def _session_seed() -> int | None:
    raw = os.getenv("WORLDSMITH_SEED", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer WORLDSMITH_SEED=%r", raw)
        return None


def spawn_settings_from_env() -> SpawnSettings:
    return SpawnSettings(
        max_enemies=_env_int("WORLDSMITH_MAX_ENEMIES", MAX_ENEMIES),
        spawn_radius=_env_float("WORLDSMITH_SPAWN_RADIUS", SPAWN_RADIUS),
        min_npc_distance=_env_float("WORLDSMITH_MIN_NPC_DISTANCE", MIN_NPC_DISTANCE),
        min_enemy_distance=_env_float("WORLDSMITH_MIN_ENEMY_DISTANCE", MIN_ENEMY_DISTANCE),
        max_attempts=_env_int("WORLDSMITH_SPAWN_ATTEMPTS", MAX_SPAWN_ATTEMPTS),
        spawn_interval_ms=_env_int("WORLDSMITH_SPAWN_INTERVAL_MS", SPAWN_INTERVAL_MS, minimum=1),
        death_animation_ms=_env_int("WORLDSMITH_DEATH_ANIMATION_MS", DEATH_ANIMATION_MS),
    )


def _load_quests() -> list[Quest]:
    configured = os.getenv("WORLDSMITH_QUEST_CONTENT", "").strip()
    path = Path(configured) if configured else default_content_path()
    if not path.exists():
        logger.warning("Quest content not found at %s; starting with no quests", path)
        return []
    try:
        return load_quest_file(path)
    except QuestContentError as exc:
        for message in exc.errors:
            logger.error("Quest content error: %s", message)
        raise


def create_game_service(
    quests: Iterable[Quest] | None = None,
    reserved_positions: Iterable[Vector3] | None = None,
) -> GameService:
    seed = _session_seed()
    event_bus = EventBus()
    clock = ManualClock()
    quest_repo = InMemoryQuestDefinitionRepository(quests if quests is not None else _load_quests())
    scene_repo = InMemoryReservedPositionRepository(reserved_positions)

    ledger = EconomyLedger(event_bus=event_bus)
    reward_surface = RewardSurface(
        event_bus=event_bus,
        scheduler=clock,
        display_ms=_env_int("WORLDSMITH_REWARD_DISPLAY_MS", REWARD_DISPLAY_MS),
    )
    quest_registry = QuestRegistry(ledger, event_bus=event_bus, definition_repo=quest_repo)
    quest_registry.register_handlers()
    spawner = EncounterSpawner(
        ledger,
        reward_surface,
        clock,
        event_bus=event_bus,
        reserved_positions=scene_repo,
        settings=spawn_settings_from_env(),
        rng=derive_rng("encounter.spawn", seed),
        loot_rng=derive_rng("encounter.loot", seed),
    )

    return GameService(
        ledger,
        quest_registry,
        spawner,
        reward_surface,
        clock,
        event_bus,
        quest_repo=quest_repo,
        scene_repo=scene_repo,
    )
