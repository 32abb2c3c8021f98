from __future__ import annotations

import json
import logging
from dataclasses import asdict, replace
from typing import Any, Mapping

from worldsmith.application.services.economy_ledger import EconomyLedger
from worldsmith.application.services.quest_registry import QuestRegistry
from worldsmith.domain.models.quest import QuestLog
from worldsmith.domain.models.stats import STAT_FIELDS, PlayerStats
from worldsmith.domain.repositories import QuestDefinitionRepository


logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def encode_state(ledger: EconomyLedger, registry: QuestRegistry) -> dict[str, Any]:
    """Blob handed to an external store; quests are referenced by id."""
    log = registry.quest_log
    return {
        "version": SNAPSHOT_VERSION,
        "player_stats": asdict(ledger.stats),
        "inventory": {entry.item_id: entry.amount for entry in ledger.inventory_entries()},
        "quest_log": {
            "active": [quest.id for quest in log.active],
            "completed": [quest.id for quest in log.completed],
            "failed": [quest.id for quest in log.failed],
        },
    }


def decode_state(
    payload: Mapping[str, Any],
    ledger: EconomyLedger,
    registry: QuestRegistry,
    definitions: QuestDefinitionRepository,
) -> list[str]:
    """Restore ledger and quest log. Returns quest ids that could not be resolved."""
    if int(payload.get("version", 0) or 0) != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version: {payload.get('version')}")

    raw_stats = payload.get("player_stats") or {}
    stats = PlayerStats(**{key: int(raw_stats[key]) for key in STAT_FIELDS if key in raw_stats})
    ledger.restore(stats, payload.get("inventory") or {})

    missing: list[str] = []
    seen: set[str] = set()
    log = QuestLog()
    rows = payload.get("quest_log") or {}
    for bucket, completed_flag in (("active", False), ("completed", True), ("failed", False)):
        for quest_id in rows.get(bucket, []):
            quest = definitions.get(str(quest_id))
            if quest is None:
                missing.append(str(quest_id))
                continue
            if quest.id in seen:
                logger.warning("Quest %s appears in more than one bucket; keeping the first", quest.id)
                continue
            seen.add(quest.id)
            getattr(log, bucket).append(replace(quest, completed=completed_flag))
    registry.restore(log)
    return missing


def dumps_state(ledger: EconomyLedger, registry: QuestRegistry) -> str:
    return json.dumps(encode_state(ledger, registry), sort_keys=True)


def loads_state(
    text: str,
    ledger: EconomyLedger,
    registry: QuestRegistry,
    definitions: QuestDefinitionRepository,
) -> list[str]:
    return decode_state(json.loads(text), ledger, registry, definitions)
