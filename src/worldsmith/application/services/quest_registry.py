from __future__ import annotations

import logging
from dataclasses import replace

from worldsmith.application.dtos import DialogueChoiceView, DialogueView, QuestLogView, QuestSummaryView
from worldsmith.application.services.economy_ledger import EconomyLedger
from worldsmith.application.services.event_bus import EventBus
from worldsmith.domain.events import (
    DialogueAdvanced,
    EnemyDefeated,
    InventoryChanged,
    QuestActionRequested,
    QuestCompleted,
    QuestFailed,
    QuestStarted,
)
from worldsmith.domain.models.quest import (
    SCENE_ACTION_KINDS,
    CompleteQuest,
    CompletionContext,
    DialogueChoice,
    EnemyDefeatCondition,
    GotoDialogue,
    ItemsCondition,
    LocationCondition,
    Quest,
    QuestAction,
    QuestActionKind,
    QuestLog,
    QuestStatus,
    is_completion_met,
)
from worldsmith.domain.repositories import QuestDefinitionRepository


logger = logging.getLogger(__name__)


def _as_index(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class QuestRegistry:
    """Quest log, dialogue cursor and quest state transitions.

    A quest id lives in at most one of the log's active/completed/failed
    collections. Rewards and costs flow through the economy ledger.
    """

    def __init__(
        self,
        ledger: EconomyLedger,
        event_bus: EventBus | None = None,
        definition_repo: QuestDefinitionRepository | None = None,
    ) -> None:
        self.ledger = ledger
        self.event_bus = event_bus
        self.definition_repo = definition_repo
        self.quest_log = QuestLog()
        self._displayed_quest_id: str | None = None
        self._dialogue_index: int | None = None
        self._defeated_enemy_types: dict[str, list[str]] = {}
        self._player_position: tuple[float, float, float] | None = None

    def register_handlers(self) -> None:
        if self.event_bus is None:
            return
        self.event_bus.subscribe(EnemyDefeated, self.on_enemy_defeated, priority=20)
        self.event_bus.subscribe(InventoryChanged, self.on_inventory_changed, priority=20)

    def _publish(self, event: object) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)

    # -- queries -----------------------------------------------------------

    def status_of(self, quest_id: str) -> QuestStatus:
        return self.quest_log.status_of(quest_id)

    def can_accept(self, quest: Quest) -> bool:
        # Item costs are paid on completion, so they do not gate acceptance.
        return self.ledger.meets_requirements(quest.requirements, include_items=False)

    def choice_available(self, choice: DialogueChoice) -> bool:
        return self.ledger.meets_requirements(choice.requirements)

    def displayed(self) -> tuple[str, int] | None:
        if self._displayed_quest_id is None or self._dialogue_index is None:
            return None
        return self._displayed_quest_id, self._dialogue_index

    def current_dialogue(self) -> DialogueView | None:
        pointer = self.displayed()
        if pointer is None:
            return None
        quest = self.quest_log.find_active(pointer[0])
        node = quest.dialogue_at(pointer[1]) if quest is not None else None
        if quest is None or node is None:
            return None
        return DialogueView(
            quest_id=quest.id,
            quest_title=quest.title,
            dialogue_index=pointer[1],
            speaker=node.speaker,
            text=node.text,
            choices=tuple(
                DialogueChoiceView(
                    index=index,
                    text=choice.text,
                    available=self.choice_available(choice),
                    completes_quest=isinstance(choice.outcome, CompleteQuest),
                )
                for index, choice in enumerate(node.choices)
            ),
        )

    def snapshot(self) -> QuestLogView:
        def _rows(quests: list[Quest]) -> tuple[QuestSummaryView, ...]:
            return tuple(QuestSummaryView(id=q.id, title=q.title, completed=q.completed) for q in quests)

        return QuestLogView(
            active=_rows(self.quest_log.active),
            completed=_rows(self.quest_log.completed),
            failed=_rows(self.quest_log.failed),
        )

    # -- transitions -------------------------------------------------------

    def start_quest(self, quest: Quest, *, allow_repeat: bool = False) -> bool:
        status = self.quest_log.status_of(quest.id)
        if status == QuestStatus.ACTIVE:
            return False
        restarted = status in {QuestStatus.COMPLETED, QuestStatus.FAILED}
        if restarted and not allow_repeat:
            logger.debug("Quest %s already %s; repeat not allowed", quest.id, status.value)
            return False
        if not self.can_accept(quest):
            logger.debug("Quest %s requirements not met", quest.id)
            return False

        if restarted:
            self.quest_log.forget_terminal(quest.id)
        self.quest_log.active.append(replace(quest, completed=False))
        self._defeated_enemy_types[quest.id] = []
        self._displayed_quest_id = quest.id
        self._dialogue_index = 0
        logger.info("Quest started: %s", quest.id)
        self._publish(QuestStarted(quest_id=quest.id, restarted=restarted))
        return True

    def start_quest_by_id(self, quest_id: str, *, allow_repeat: bool = False) -> bool:
        if self.definition_repo is None:
            return False
        quest = self.definition_repo.get(quest_id)
        if quest is None:
            return False
        return self.start_quest(quest, allow_repeat=allow_repeat)

    def advance_dialogue(self, choice_index: int) -> bool:
        pointer = self.displayed()
        if pointer is None:
            return False
        quest_id, dialogue_index = pointer
        quest = self.quest_log.find_active(quest_id)
        if quest is None:
            return False
        index = _as_index(choice_index)
        node = quest.dialogue_at(dialogue_index)
        if node is None or index is None or not 0 <= index < len(node.choices):
            return False

        choice = node.choices[index]
        if not self.choice_available(choice):
            return False

        if choice.action is not None:
            self._run_action(quest, choice.action)
            if self.quest_log.find_active(quest.id) is None:
                return True

        outcome = choice.outcome
        if isinstance(outcome, GotoDialogue):
            return self._move_dialogue(quest, outcome.index)
        if isinstance(outcome, CompleteQuest):
            return self.complete_quest(quest.id)
        raise TypeError(f"Unsupported choice outcome: {outcome!r}")

    def complete_quest(self, quest_id: str) -> bool:
        quest = self.quest_log.take_active(quest_id)
        if quest is None:
            return False

        rewards = quest.rewards
        if rewards.experience:
            self.ledger.grant_experience(rewards.experience)
        if rewards.currency:
            self.ledger.grant_currency(rewards.currency)
        if rewards.energy:
            self.ledger.restore_energy(rewards.energy)
        for stack in rewards.items:
            self.ledger.add_item(stack.item_id, stack.amount)
        # Costs come after rewards; each is clamped at zero.
        self.ledger.pay_requirement_costs(quest.requirements)

        self.quest_log.completed.append(replace(quest, completed=True))
        self._defeated_enemy_types.pop(quest_id, None)
        self._clear_display_for(quest_id)
        logger.info("Quest completed: %s", quest_id)
        self._publish(
            QuestCompleted(
                quest_id=quest_id,
                reward_experience=rewards.experience,
                reward_currency=rewards.currency,
            )
        )
        return True

    def fail_quest(self, quest_id: str, reason: str = "explicit") -> bool:
        quest = self.quest_log.take_active(quest_id)
        if quest is None:
            return False
        self.quest_log.failed.append(quest)
        self._defeated_enemy_types.pop(quest_id, None)
        self._clear_display_for(quest_id)
        logger.info("Quest failed: %s (%s)", quest_id, reason)
        self._publish(QuestFailed(quest_id=quest_id, reason=reason))
        return True

    def restore(self, quest_log: QuestLog) -> None:
        """Adopt a persisted log; dialogue progress is not persisted."""
        self.quest_log = quest_log
        self._defeated_enemy_types = {quest.id: [] for quest in quest_log.active}
        self.close_dialogue()

    def close_dialogue(self) -> None:
        self._displayed_quest_id = None
        self._dialogue_index = None

    def _clear_display_for(self, quest_id: str) -> None:
        if self._displayed_quest_id == quest_id:
            self.close_dialogue()

    def _move_dialogue(self, quest: Quest, target_index: int) -> bool:
        if quest.dialogue_at(target_index) is None:
            logger.warning("Quest %s has no dialogue %s", quest.id, target_index)
            return False
        from_index = self._dialogue_index if self._dialogue_index is not None else 0
        self._displayed_quest_id = quest.id
        self._dialogue_index = int(target_index)
        self._publish(DialogueAdvanced(quest_id=quest.id, from_index=from_index, to_index=int(target_index)))
        return True

    def _run_action(self, quest: Quest, action: QuestAction) -> None:
        params = dict(action.params or {})
        kind = action.kind
        if kind == QuestActionKind.COMPLETE:
            self.complete_quest(quest.id)
        elif kind == QuestActionKind.FAIL:
            self.fail_quest(quest.id, reason="dialogue")
        elif kind == QuestActionKind.GIVE_ITEM:
            self.ledger.add_item(str(params.get("item_id", "")), params.get("amount", 1))
        elif kind == QuestActionKind.REMOVE_ITEM:
            self.ledger.remove_item(str(params.get("item_id", "")), params.get("amount", 1))
        elif kind == QuestActionKind.UPDATE_STAGE:
            stage = _as_index(params.get("stage_id", 0))
            if stage is None:
                logger.warning("Quest %s update_stage without a usable stage_id", quest.id)
            else:
                self._move_dialogue(quest, stage)
        elif kind in SCENE_ACTION_KINDS:
            self._publish(QuestActionRequested(quest_id=quest.id, kind=kind.value, params=params))
        else:
            logger.warning("Unhandled quest action %s", kind)

    # -- completion conditions --------------------------------------------

    def evaluate_completion(self, quest_id: str) -> bool:
        quest = self.quest_log.find_active(quest_id)
        if quest is None:
            return False
        context = CompletionContext(
            has_item=self.ledger.has_item,
            defeated_enemy_types=tuple(self._defeated_enemy_types.get(quest_id, [])),
            player_position=self._player_position,
        )
        if not is_completion_met(quest.completion, context):
            return False
        return self.complete_quest(quest_id)

    def _evaluate_where(self, condition_type: type) -> list[str]:
        completed: list[str] = []
        for quest in list(self.quest_log.active):
            if isinstance(quest.completion, condition_type) and self.evaluate_completion(quest.id):
                completed.append(quest.id)
        return completed

    def report_player_position(self, x: float, y: float, z: float) -> list[str]:
        self._player_position = (float(x), float(y), float(z))
        return self._evaluate_where(LocationCondition)

    def on_enemy_defeated(self, event: EnemyDefeated) -> None:
        for quest in self.quest_log.active:
            if isinstance(quest.completion, EnemyDefeatCondition):
                self._defeated_enemy_types.setdefault(quest.id, []).append(event.enemy_type)
        self._evaluate_where(EnemyDefeatCondition)

    def on_inventory_changed(self, event: InventoryChanged) -> None:
        if event.delta <= 0:
            return
        self._evaluate_where(ItemsCondition)
