from __future__ import annotations


LEVEL_CAP = 50

LEVEL_STEP_LINEAR_XP = 100
LEVEL_STEP_QUADRATIC_XP = 25

LEVEL_UP_HEALTH_BONUS = 10
LEVEL_UP_ENERGY_BONUS = 10
LEVEL_UP_DAMAGE_BONUS = 5

MAX_ENEMIES = 5
SPAWN_RADIUS = 30.0
MIN_NPC_DISTANCE = 10.0
MIN_ENEMY_DISTANCE = 4.0
MAX_SPAWN_ATTEMPTS = 10
SPAWN_INTERVAL_MS = 5000
DEATH_ANIMATION_MS = 1000
REWARD_DISPLAY_MS = 600

ENEMY_LEVEL_SPREAD = 2
ENEMY_HEALTH_MULTIPLIER = 1.5


def xp_step_for_level(level: int) -> int:
    """Experience needed to go from ``level`` to ``level + 1``."""
    safe_level = max(1, int(level))
    return safe_level * LEVEL_STEP_LINEAR_XP + safe_level * safe_level * LEVEL_STEP_QUADRATIC_XP


def xp_threshold_for_level(level: int) -> int:
    """Cumulative experience needed to reach ``level``."""
    safe_level = max(1, min(int(level), LEVEL_CAP))
    return sum(xp_step_for_level(step) for step in range(1, safe_level))


def level_for_experience(experience: int, *, current_level: int = 1) -> int:
    level = max(1, min(int(current_level), LEVEL_CAP))
    total = max(0, int(experience))
    threshold = xp_threshold_for_level(level + 1)
    while level < LEVEL_CAP and total >= threshold:
        level += 1
        threshold += xp_step_for_level(level)
    return level


def scaled_enemy_level(player_level: int, offset: int) -> int:
    return max(1, int(player_level) + int(offset))


def enemy_level_scale(enemy_level: int, base_level: int) -> float:
    return max(1, int(enemy_level)) / max(1, int(base_level))
