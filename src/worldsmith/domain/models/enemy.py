from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def ground_distance_to(self, other: "Vector3") -> float:
        """Distance on the x/z plane; height is ignored for spacing checks."""

        return math.hypot(self.x - other.x, self.z - other.z)


@dataclass(frozen=True)
class LootEntry:
    item_id: str
    drop_chance: float
    amount: int = 1

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.drop_chance) <= 1.0:
            raise ValueError(f"Drop chance for {self.item_id} must be within [0, 1]")
        if int(self.amount) <= 0:
            raise ValueError(f"Loot amount for {self.item_id} must be positive")


@dataclass(frozen=True)
class EnemyTemplate:
    """Catalog row an enemy instance is scaled from."""

    type: str
    name: str
    level: int
    health: int
    damage: int
    experience: int
    currency: int = 0
    loot: tuple[LootEntry, ...] = ()
    scale: float = 1.0


@dataclass
class Enemy:
    id: str
    type: str
    name: str
    level: int
    position: Vector3
    health: int
    max_health: int
    damage: int
    experience: int
    currency: int = 0
    loot: tuple[LootEntry, ...] = ()
    scale: float = 1.0
    dying: bool = False
