from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass
class PlayerStats:
    """Session-long player numbers.

    Only the economy ledger mutates an instance; everything else reads copies
    through ``PlayerStatsView``.
    """

    level: int = 1
    experience: int = 0
    currency: int = 0
    health: int = 100
    max_health: int = 100
    energy: int = 100
    max_energy: int = 100
    damage: int = 10

    def __post_init__(self) -> None:
        if int(self.level) < 1:
            raise ValueError("Level must be at least 1")
        if int(self.experience) < 0:
            raise ValueError("Experience cannot be negative")
        if int(self.currency) < 0:
            raise ValueError("Currency cannot be negative")


STAT_FIELDS: tuple[str, ...] = tuple(row.name for row in fields(PlayerStats))
