import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


_ENGINE_ENV_VARS = (
    "WORLDSMITH_SEED",
    "WORLDSMITH_MAX_ENEMIES",
    "WORLDSMITH_SPAWN_RADIUS",
    "WORLDSMITH_MIN_NPC_DISTANCE",
    "WORLDSMITH_MIN_ENEMY_DISTANCE",
    "WORLDSMITH_SPAWN_ATTEMPTS",
    "WORLDSMITH_SPAWN_INTERVAL_MS",
    "WORLDSMITH_DEATH_ANIMATION_MS",
    "WORLDSMITH_REWARD_DISPLAY_MS",
    "WORLDSMITH_QUEST_CONTENT",
)


@pytest.fixture(autouse=True)
def isolated_engine_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENGINE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
