from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping

from worldsmith.application.dtos import InventoryItemView, PlayerStatsView
from worldsmith.application.services.balance_tables import (
    LEVEL_UP_DAMAGE_BONUS,
    LEVEL_UP_ENERGY_BONUS,
    LEVEL_UP_HEALTH_BONUS,
    level_for_experience,
    xp_threshold_for_level,
)
from worldsmith.application.services.event_bus import EventBus
from worldsmith.domain.events import InventoryChanged, LevelUpApplied, PlayerStatsChanged
from worldsmith.domain.models.inventory import InventoryEntry
from worldsmith.domain.models.quest import QuestRequirements
from worldsmith.domain.models.stats import STAT_FIELDS, PlayerStats


logger = logging.getLogger(__name__)

# Maxima are merged first so health/energy clamp against the updated caps.
_MERGE_ORDER = ("max_health", "max_energy", "level", "damage", "currency", "health", "energy", "experience")


class EconomyLedger:
    """Authoritative holder of player stats and the sparse inventory.

    Every operation absorbs invalid input: bad requests return ``False`` (or
    ``0``) and leave state untouched. Observers learn about changes through
    the event bus.
    """

    def __init__(self, event_bus: EventBus | None = None, stats: PlayerStats | None = None) -> None:
        self.event_bus = event_bus
        self._stats = replace(stats) if stats is not None else PlayerStats()
        self._inventory: dict[str, int] = {}

    def _publish(self, event: object) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)

    @staticmethod
    def _coerce_int(value: Any) -> int | None:
        if isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    # -- stats -----------------------------------------------------------

    @property
    def stats(self) -> PlayerStats:
        return replace(self._stats)

    def update_stats(self, updates: Mapping[str, Any] | None = None, **fields: Any) -> bool:
        merged: dict[str, Any] = dict(updates or {})
        merged.update(fields)

        for key in merged:
            if key not in STAT_FIELDS:
                logger.debug("Ignoring unknown stat field %s", key)

        stats = self._stats
        changed: list[str] = []
        for key in _MERGE_ORDER:
            if key not in merged:
                continue
            value = self._coerce_int(merged[key])
            if value is None:
                logger.debug("Ignoring non-integer value for stat %s: %r", key, merged[key])
                continue

            if key == "level":
                value = max(1, value)
            elif key in {"max_health", "max_energy"}:
                value = max(1, value)
            elif key == "currency":
                value = max(0, value)
            elif key == "health":
                value = max(0, min(value, stats.max_health))
            elif key == "energy":
                value = max(0, min(value, stats.max_energy))
            elif key == "experience":
                if value < stats.experience:
                    logger.debug("Ignoring experience decrease %s -> %s", stats.experience, value)
                    continue

            if getattr(stats, key) != value:
                setattr(stats, key, value)
                changed.append(key)

        if stats.health > stats.max_health:
            stats.health = stats.max_health
            changed.append("health")
        if stats.energy > stats.max_energy:
            stats.energy = stats.max_energy
            changed.append("energy")

        if "experience" in changed or "level" in changed:
            if self._apply_leveling():
                changed.extend(("level", "max_health", "max_energy", "damage", "health", "energy"))

        if not changed:
            return False

        self._publish(
            PlayerStatsChanged(
                changed_fields=tuple(dict.fromkeys(changed)),
                level=stats.level,
                experience=stats.experience,
            )
        )
        return True

    def _apply_leveling(self) -> int:
        stats = self._stats
        from_level = stats.level
        to_level = level_for_experience(stats.experience, current_level=from_level)
        gained = to_level - from_level
        if gained <= 0:
            return 0

        stats.level = to_level
        stats.max_health += LEVEL_UP_HEALTH_BONUS * gained
        stats.max_energy += LEVEL_UP_ENERGY_BONUS * gained
        stats.damage += LEVEL_UP_DAMAGE_BONUS * gained
        stats.health = stats.max_health
        stats.energy = stats.max_energy
        logger.info("Player reached level %s (from %s)", to_level, from_level)
        self._publish(
            LevelUpApplied(
                from_level=from_level,
                to_level=to_level,
                health_gain=LEVEL_UP_HEALTH_BONUS * gained,
                energy_gain=LEVEL_UP_ENERGY_BONUS * gained,
                damage_gain=LEVEL_UP_DAMAGE_BONUS * gained,
            )
        )
        return gained

    def grant_experience(self, amount: int) -> int:
        """Add experience and return how many levels were gained."""
        value = self._coerce_int(amount)
        if value is None or value <= 0:
            return 0
        level_before = self._stats.level
        self.update_stats(experience=self._stats.experience + value)
        return self._stats.level - level_before

    def grant_currency(self, amount: int) -> bool:
        value = self._coerce_int(amount)
        if value is None or value <= 0:
            return False
        return self.update_stats(currency=self._stats.currency + value)

    def restore_energy(self, amount: int) -> bool:
        value = self._coerce_int(amount)
        if value is None or value <= 0:
            return False
        return self.update_stats(energy=self._stats.energy + value)

    # -- inventory -------------------------------------------------------

    def add_item(self, item_id: str, amount: int = 1) -> bool:
        key = str(item_id or "").strip()
        value = self._coerce_int(amount)
        if not key or value is None or value <= 0:
            return False
        self._inventory[key] = self._inventory.get(key, 0) + value
        self._publish(InventoryChanged(item_id=key, delta=value, amount_after=self._inventory[key]))
        return True

    def remove_item(self, item_id: str, amount: int = 1) -> bool:
        key = str(item_id or "").strip()
        value = self._coerce_int(amount)
        held = self._inventory.get(key, 0)
        if not key or value is None or value <= 0 or held < value:
            return False
        remaining = held - value
        if remaining > 0:
            self._inventory[key] = remaining
        else:
            del self._inventory[key]
        self._publish(InventoryChanged(item_id=key, delta=-value, amount_after=remaining))
        return True

    def has_item(self, item_id: str, amount: int = 1) -> bool:
        value = self._coerce_int(amount)
        if value is None:
            return False
        return self.get_item_count(item_id) >= max(1, value)

    def get_item_count(self, item_id: str) -> int:
        return int(self._inventory.get(str(item_id or "").strip(), 0))

    def inventory_entries(self) -> list[InventoryEntry]:
        return [InventoryEntry(item_id=key, amount=value) for key, value in self._inventory.items()]

    # -- gating ------------------------------------------------------------

    def meets_requirements(self, requirements: QuestRequirements | None, *, include_items: bool = True) -> bool:
        if requirements is None:
            return True
        stats = self._stats
        if requirements.level is not None and stats.level < int(requirements.level):
            return False
        if requirements.energy is not None and stats.energy < int(requirements.energy):
            return False
        if requirements.currency is not None and stats.currency < int(requirements.currency):
            return False
        if include_items:
            for stack in requirements.items:
                if not self.has_item(stack.item_id, stack.amount):
                    return False
        return True

    def pay_requirement_costs(self, requirements: QuestRequirements | None) -> None:
        """Deduct currency, energy and item costs, never dropping below zero."""
        if requirements is None:
            return
        if requirements.currency:
            self.update_stats(currency=max(0, self._stats.currency - int(requirements.currency)))
        if requirements.energy:
            self.update_stats(energy=max(0, self._stats.energy - int(requirements.energy)))
        for stack in requirements.items:
            taken = min(self.get_item_count(stack.item_id), int(stack.amount))
            if taken > 0:
                self.remove_item(stack.item_id, taken)

    # -- snapshots ---------------------------------------------------------

    def stats_view(self) -> PlayerStatsView:
        stats = self._stats
        next_level_xp = xp_threshold_for_level(stats.level + 1)
        return PlayerStatsView(
            level=stats.level,
            experience=stats.experience,
            currency=stats.currency,
            health=stats.health,
            max_health=stats.max_health,
            energy=stats.energy,
            max_energy=stats.max_energy,
            damage=stats.damage,
            next_level_experience=next_level_xp,
            experience_to_next_level=max(0, next_level_xp - stats.experience),
        )

    def inventory_view(self) -> tuple[InventoryItemView, ...]:
        return tuple(InventoryItemView(item_id=key, amount=value) for key, value in self._inventory.items())

    def restore(self, stats: PlayerStats, inventory: Mapping[str, int]) -> None:
        """Replace all state, e.g. from a persisted snapshot. Non-positive rows are dropped."""
        self._stats = replace(stats)
        self._inventory = {}
        for key, value in dict(inventory or {}).items():
            amount = self._coerce_int(value)
            if str(key).strip() and amount is not None and amount > 0:
                self._inventory[str(key).strip()] = amount
        self._publish(
            PlayerStatsChanged(
                changed_fields=STAT_FIELDS,
                level=self._stats.level,
                experience=self._stats.experience,
            )
        )
