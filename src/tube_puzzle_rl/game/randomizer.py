from __future__ import annotations

import random
from typing import List, Optional, Protocol

from .pieces import TetrominoType


class PieceSource(Protocol):
    def next_piece(self) -> TetrominoType:
        ...


class SevenBag:
    """Deals every tetromino once per shuffled bag."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = random.Random(seed)
        self._bag: List[TetrominoType] = []

    def _refill(self) -> None:
        bag = list(TetrominoType)
        self.rng.shuffle(bag)
        self._bag.extend(bag)

    def next_piece(self) -> TetrominoType:
        if not self._bag:
            self._refill()
        return self._bag.pop(0)
