from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InventoryEntry:
    item_id: str
    amount: int

    def __post_init__(self) -> None:
        if not str(self.item_id or "").strip():
            raise ValueError("Inventory item id cannot be empty")
        if int(self.amount) <= 0:
            raise ValueError("Inventory amount must be positive")


@dataclass(frozen=True)
class ItemStack:
    """An (item, amount) pair used by quest requirements and rewards."""

    item_id: str
    amount: int = 1

    def __post_init__(self) -> None:
        if not str(self.item_id or "").strip():
            raise ValueError("Item id cannot be empty")
        if int(self.amount) <= 0:
            raise ValueError("Item amount must be positive")
