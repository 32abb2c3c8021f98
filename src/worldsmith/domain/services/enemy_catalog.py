from __future__ import annotations

from collections.abc import Mapping

from worldsmith.domain.models.enemy import EnemyTemplate, LootEntry


ENEMY_CATALOG: Mapping[str, EnemyTemplate] = {
    "goblin": EnemyTemplate(
        type="goblin",
        name="Goblin Scout",
        level=1,
        health=30,
        damage=5,
        experience=25,
        currency=4,
        loot=(
            LootEntry("wood", 0.6, 2),
            LootEntry("bread", 0.3, 1),
        ),
        scale=0.8,
    ),
    "wolf": EnemyTemplate(
        type="wolf",
        name="Grey Wolf",
        level=2,
        health=40,
        damage=8,
        experience=35,
        currency=2,
        loot=(
            LootEntry("meat", 0.7, 1),
        ),
        scale=1.0,
    ),
    "skeleton": EnemyTemplate(
        type="skeleton",
        name="Restless Skeleton",
        level=3,
        health=55,
        damage=10,
        experience=50,
        currency=8,
        loot=(
            LootEntry("stone", 0.5, 3),
            LootEntry("ancient_scroll", 0.05, 1),
        ),
        scale=1.2,
    ),
    "orc": EnemyTemplate(
        type="orc",
        name="Orc Brute",
        level=5,
        health=90,
        damage=16,
        experience=90,
        currency=15,
        loot=(
            LootEntry("iron_ore", 0.4, 2),
            LootEntry("health_potion", 0.25, 1),
        ),
        scale=1.5,
    ),
    "golem": EnemyTemplate(
        type="golem",
        name="Crystal Golem",
        level=8,
        health=160,
        damage=22,
        experience=160,
        currency=30,
        loot=(
            LootEntry("magic_crystal", 0.3, 1),
            LootEntry("gold_ore", 0.5, 2),
        ),
        scale=2.0,
    ),
}
