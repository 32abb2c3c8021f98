from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Mapping, Sequence

from worldsmith.domain.models.inventory import ItemStack
from worldsmith.domain.models.quest import (
    CompleteQuest,
    CompletionCondition,
    DialogueChoice,
    DialogueNode,
    EnemyDefeatCondition,
    GotoDialogue,
    ItemsCondition,
    LocationCondition,
    ManualCompletion,
    Quest,
    QuestAction,
    QuestActionKind,
    QuestRequirements,
    QuestRewards,
)


QUEST_CONTENT_FILE = "data/quests/starter_quests.json"
_ACTION_KINDS = {kind.value for kind in QuestActionKind}
_COMPLETION_KINDS = ("items", "enemy_defeat", "location", "manual")


class QuestContentError(ValueError):
    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"Quest content invalid ({len(errors)} errors): " + "; ".join(errors[:5]))
        self.errors = list(errors)


def default_content_path() -> Path:
    project_root = Path(__file__).resolve().parents[3]
    return project_root / QUEST_CONTENT_FILE


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate_items(owner: str, value: object, errors: list[str]) -> None:
    if value is None:
        return
    if not isinstance(value, list):
        errors.append(f"{owner} must be a list")
        return
    for index, row in enumerate(value):
        prefix = f"{owner}[{index}]"
        if not isinstance(row, dict):
            errors.append(f"{prefix} must be an object")
            continue
        if not str(row.get("item_id", "")).strip():
            errors.append(f"{prefix}.item_id is required")
        amount = row.get("amount", 1)
        if not _is_int(amount) or amount <= 0:
            errors.append(f"{prefix}.amount must be a positive integer")


def _validate_requirements(owner: str, value: object, errors: list[str]) -> None:
    if value is None:
        return
    if not isinstance(value, dict):
        errors.append(f"{owner} must be an object")
        return
    for key in ("level", "energy", "currency"):
        raw = value.get(key)
        if raw is not None and (not _is_int(raw) or raw < 0):
            errors.append(f"{owner}.{key} must be a non-negative integer")
    _validate_items(f"{owner}.items", value.get("items"), errors)


def _validate_action(owner: str, value: object, dialogue_count: int, errors: list[str]) -> None:
    if value is None:
        return
    if not isinstance(value, dict):
        errors.append(f"{owner} must be an object")
        return
    kind = str(value.get("kind", "")).strip().lower()
    if kind not in _ACTION_KINDS:
        errors.append(f"{owner}.kind must be one of {'|'.join(sorted(_ACTION_KINDS))}")
        return
    params = value.get("params", {})
    if not isinstance(params, dict):
        errors.append(f"{owner}.params must be an object")
        return
    if kind in {"give_item", "remove_item"}:
        if not str(params.get("item_id", "")).strip():
            errors.append(f"{owner}.params.item_id is required")
        amount = params.get("amount", 1)
        if not _is_int(amount) or amount <= 0:
            errors.append(f"{owner}.params.amount must be a positive integer")
    if kind == "update_stage":
        stage = params.get("stage_id")
        if not _is_int(stage) or not 0 <= stage < dialogue_count:
            errors.append(f"{owner}.params.stage_id must reference an existing dialogue")


def _validate_completion(owner: str, value: object, errors: list[str]) -> None:
    if value is None:
        return
    if not isinstance(value, dict):
        errors.append(f"{owner} must be an object")
        return
    kind = str(value.get("kind", "manual")).strip().lower()
    if kind not in _COMPLETION_KINDS:
        errors.append(f"{owner}.kind must be one of {'|'.join(_COMPLETION_KINDS)}")
        return
    if kind == "items":
        if not value.get("items"):
            errors.append(f"{owner}.items is required for items completion")
        _validate_items(f"{owner}.items", value.get("items"), errors)
    elif kind == "enemy_defeat":
        enemy_types = value.get("enemy_types", [])
        if not isinstance(enemy_types, list):
            errors.append(f"{owner}.enemy_types must be a list")
    elif kind == "location":
        for key in ("x", "y", "z", "radius"):
            if not _is_number(value.get(key)):
                errors.append(f"{owner}.{key} must be a number")
        if _is_number(value.get("radius")) and value["radius"] <= 0:
            errors.append(f"{owner}.radius must be positive")


def validate_quest_content(payload: object) -> list[str]:
    if not isinstance(payload, dict):
        return ["payload must be an object"]
    quests = payload.get("quests")
    if not isinstance(quests, list):
        return ["payload.quests must be a list"]

    errors: list[str] = []
    seen_ids: set[str] = set()
    for quest_index, quest in enumerate(quests):
        prefix = f"quests[{quest_index}]"
        if not isinstance(quest, dict):
            errors.append(f"{prefix} must be an object")
            continue
        quest_id = str(quest.get("id", "")).strip()
        if not quest_id:
            errors.append(f"{prefix}.id is required")
        elif quest_id in seen_ids:
            errors.append(f"{prefix}.id duplicates {quest_id}")
        seen_ids.add(quest_id)
        if not str(quest.get("title", "")).strip():
            errors.append(f"{prefix}.title is required")

        _validate_requirements(f"{prefix}.requirements", quest.get("requirements"), errors)
        rewards = quest.get("rewards")
        if rewards is not None:
            if not isinstance(rewards, dict):
                errors.append(f"{prefix}.rewards must be an object")
            else:
                for key in ("experience", "currency", "energy"):
                    raw = rewards.get(key, 0)
                    if not _is_int(raw) or raw < 0:
                        errors.append(f"{prefix}.rewards.{key} must be a non-negative integer")
                _validate_items(f"{prefix}.rewards.items", rewards.get("items"), errors)

        dialogues = quest.get("dialogues", [])
        if not isinstance(dialogues, list):
            errors.append(f"{prefix}.dialogues must be a list")
            continue
        for dialogue_index, node in enumerate(dialogues):
            node_prefix = f"{prefix}.dialogues[{dialogue_index}]"
            if not isinstance(node, dict):
                errors.append(f"{node_prefix} must be an object")
                continue
            if node.get("id", dialogue_index) != dialogue_index:
                errors.append(f"{node_prefix}.id must equal its position ({dialogue_index})")
            if not str(node.get("text", "")).strip():
                errors.append(f"{node_prefix}.text is required")
            choices = node.get("choices", [])
            if not isinstance(choices, list):
                errors.append(f"{node_prefix}.choices must be a list")
                continue
            for choice_index, choice in enumerate(choices):
                choice_prefix = f"{node_prefix}.choices[{choice_index}]"
                if not isinstance(choice, dict):
                    errors.append(f"{choice_prefix} must be an object")
                    continue
                if not str(choice.get("text", "")).strip():
                    errors.append(f"{choice_prefix}.text is required")
                target = choice.get("next_dialogue")
                if target is not None and (not _is_int(target) or not 0 <= target < len(dialogues)):
                    errors.append(f"{choice_prefix}.next_dialogue must reference an existing dialogue")
                _validate_requirements(f"{choice_prefix}.requirements", choice.get("requirements"), errors)
                _validate_action(f"{choice_prefix}.action", choice.get("action"), len(dialogues), errors)

        _validate_completion(f"{prefix}.completion", quest.get("completion"), errors)
    return errors


def _parse_items(rows: object) -> tuple[ItemStack, ...]:
    if not isinstance(rows, list):
        return ()
    return tuple(ItemStack(item_id=str(row["item_id"]).strip(), amount=int(row.get("amount", 1))) for row in rows)


def _parse_requirements(row: Mapping[str, Any] | None) -> QuestRequirements:
    row = row or {}
    return QuestRequirements(
        level=row.get("level"),
        energy=row.get("energy"),
        currency=row.get("currency"),
        items=_parse_items(row.get("items")),
    )


def _parse_completion(row: Mapping[str, Any] | None) -> CompletionCondition:
    row = row or {}
    kind = str(row.get("kind", "manual")).strip().lower()
    if kind == "items":
        return ItemsCondition(items=_parse_items(row.get("items")))
    if kind == "enemy_defeat":
        return EnemyDefeatCondition(enemy_types=tuple(str(value) for value in row.get("enemy_types", [])))
    if kind == "location":
        return LocationCondition(
            x=float(row["x"]),
            y=float(row["y"]),
            z=float(row["z"]),
            radius=float(row["radius"]),
        )
    return ManualCompletion()


def parse_quest(row: Mapping[str, Any]) -> Quest:
    dialogues: list[DialogueNode] = []
    for index, node in enumerate(row.get("dialogues", [])):
        choices: list[DialogueChoice] = []
        for choice in node.get("choices", []):
            target = choice.get("next_dialogue")
            action_row = choice.get("action")
            choices.append(
                DialogueChoice(
                    text=str(choice["text"]),
                    outcome=GotoDialogue(int(target)) if target is not None else CompleteQuest(),
                    requirements=_parse_requirements(choice["requirements"]) if choice.get("requirements") else None,
                    action=(
                        QuestAction(
                            kind=QuestActionKind(str(action_row["kind"]).strip().lower()),
                            params=dict(action_row.get("params", {})),
                        )
                        if action_row
                        else None
                    ),
                )
            )
        dialogues.append(
            DialogueNode(
                id=index,
                speaker=str(node.get("speaker", "")),
                text=str(node["text"]),
                choices=tuple(choices),
            )
        )

    rewards = row.get("rewards") or {}
    return Quest(
        id=str(row["id"]).strip(),
        title=str(row["title"]),
        description=str(row.get("description", "")),
        requirements=_parse_requirements(row.get("requirements")),
        rewards=QuestRewards(
            experience=int(rewards.get("experience", 0)),
            currency=int(rewards.get("currency", 0)),
            energy=int(rewards.get("energy", 0)),
            items=_parse_items(rewards.get("items")),
        ),
        dialogues=tuple(dialogues),
        completion=_parse_completion(row.get("completion")),
    )


def parse_quest_content(payload: object) -> list[Quest]:
    errors = validate_quest_content(payload)
    if errors:
        raise QuestContentError(errors)
    return [parse_quest(row) for row in payload["quests"]]


def _read_payload(source: Path) -> object:
    try:
        return json.loads(source.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise QuestContentError([f"File not found: {source}"]) from exc
    except json.JSONDecodeError as exc:
        raise QuestContentError([f"Invalid JSON: {exc}"]) from exc


def load_quest_file(path: str | Path) -> list[Quest]:
    return parse_quest_content(_read_payload(Path(path)))


def validate_quest_file(path: str | Path) -> list[str]:
    """Collect every problem in a quest file without raising."""
    try:
        payload = _read_payload(Path(path))
    except QuestContentError as exc:
        return exc.errors
    return validate_quest_content(payload)


def main(argv: Sequence[str] | None = None) -> int:
    """Check quest files, e.g. ``python -m worldsmith.infrastructure.quest_content data/quests/*.json``."""
    parser = argparse.ArgumentParser(description="Check quest content files for schema and dialogue-link errors")
    parser.add_argument("paths", nargs="*", help=f"Quest JSON files (default: {QUEST_CONTENT_FILE})")
    args = parser.parse_args(list(argv) if argv is not None else None)

    failed = 0
    for path in args.paths or [str(default_content_path())]:
        errors = validate_quest_file(path)
        if not errors:
            print(f"{path}: ok")
            continue
        failed += 1
        print(f"{path}: {len(errors)} error(s)")
        for message in errors:
            print(f"  - {message}")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
