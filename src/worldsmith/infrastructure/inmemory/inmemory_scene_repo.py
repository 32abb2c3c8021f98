from __future__ import annotations

from typing import Iterable, List

from worldsmith.domain.models.enemy import Vector3
from worldsmith.domain.repositories import ReservedPositionRepository


class InMemoryReservedPositionRepository(ReservedPositionRepository):
    """NPC placements handed over by the scene editor."""

    def __init__(self, positions: Iterable[Vector3] | None = None) -> None:
        self._positions: list[Vector3] = list(positions or ())

    def list_reserved(self) -> List[Vector3]:
        return list(self._positions)
