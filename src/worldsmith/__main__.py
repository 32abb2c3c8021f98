from pathlib import Path
import logging
import os
import sys

from dotenv import load_dotenv

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from worldsmith.bootstrap import create_game_service
from worldsmith.domain.events import LevelUpApplied, QuestCompleted, RewardPublished
from worldsmith.domain.models.enemy import Vector3
from worldsmith.infrastructure.quest_content import QuestContentError

load_dotenv()

_VILLAGE_NPCS = (
    Vector3(0.0, 0.0, 0.0),
    Vector3(6.0, 0.0, -4.0),
    Vector3(-8.0, 0.0, 5.0),
)


def _print_help_surface() -> None:
    print("\nHelp:")
    print("- Quest content: set WORLDSMITH_QUEST_CONTENT to a JSON file, or validate it with")
    print("  python -m worldsmith.infrastructure.quest_content <file>")
    print("- Reproducible runs: set WORLDSMITH_SEED to an integer.")


def run_demo_session(ticks: int = 12, tick_ms: int = 1000) -> None:
    service = create_game_service(reserved_positions=_VILLAGE_NPCS)
    service.subscribe(QuestCompleted, lambda evt: print(f"Quest complete: {evt.quest_id} (+{evt.reward_experience} xp)"))
    service.subscribe(LevelUpApplied, lambda evt: print(f"Level up! {evt.from_level} -> {evt.to_level}"))
    service.subscribe(RewardPublished, lambda evt: print(f"Loot: {evt.amount}x {evt.item_id} (+{evt.experience} xp)"))

    if service.start_quest("goblin_trouble"):
        dialogue = service.current_dialogue()
        if dialogue is not None:
            print(f"{dialogue.speaker}: {dialogue.text}")
        service.advance_dialogue(0)

    service.start_spawning()
    for _ in range(ticks):
        service.advance_time(tick_ms)
        for enemy in service.enemies():
            if not enemy.dying:
                service.damage_enemy(enemy.id, service.player_stats().damage)

    stats = service.player_stats()
    print(
        f"\nLevel {stats.level} | XP {stats.experience}/{stats.next_level_experience} | "
        f"Gold {stats.currency} | HP {stats.health}/{stats.max_health}"
    )
    for item in service.inventory():
        print(f"- {item.item_id} x{item.amount}")


def main():
    logging.basicConfig(
        level=os.getenv("WORLDSMITH_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        run_demo_session()
    except KeyboardInterrupt:
        print("\nSession ended.")
    except QuestContentError as exc:
        print("Quest content could not be loaded.")
        print(f"Reason: {exc}")
        _print_help_surface()
    except Exception as exc:
        print("An unexpected error occurred. The session closed safely.")
        print(f"Reason: {exc}")
        _print_help_surface()


if __name__ == "__main__":
    main()
