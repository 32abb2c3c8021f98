from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RewardEvent:
    item_id: str
    amount: int
    experience: int
