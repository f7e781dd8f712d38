from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .pieces import SHAPE_COLORS, ActivePiece, TetrominoType


logger = logging.getLogger(__name__)

EMPTY_COLOR: Tuple[int, int, int] = (20, 20, 26)


def normalize(segment: int, segments: int) -> int:
    return ((segment % segments) + segments) % segments


@dataclass(frozen=True)
class GridCell:
    occupied: bool
    kind: Optional[TetrominoType] = None

    @property
    def color(self) -> Tuple[int, int, int]:
        if self.kind is None:
            return EMPTY_COLOR
        return SHAPE_COLORS[self.kind]


class TubeGrid:
    """Cyclic occupancy grid wrapped around the tube.

    Cells are stored as ``cells[row, segment]`` with 0 for empty and the
    owning ``TetrominoType`` value otherwise. Row 0 is the bottom ring;
    rows at or above ``rows`` are the spawn buffer and always read as free.
    """

    def __init__(self, segments: int, rows: int) -> None:
        if int(segments) <= 0 or int(rows) <= 0:
            raise ValueError("Grid segments/rows must be > 0")
        self.segments = int(segments)
        self.rows = int(rows)
        self.cells = np.zeros((self.rows, self.segments), dtype=np.int8)

    def clear(self) -> None:
        self.cells.fill(0)

    def is_occupied(self, segment: int, row: int) -> bool:
        if row < 0 or row >= self.rows:
            return False
        return bool(self.cells[row, normalize(segment, self.segments)] != 0)

    def cell(self, segment: int, row: int) -> GridCell:
        if row < 0 or row >= self.rows:
            return GridCell(occupied=False)
        value = int(self.cells[row, normalize(segment, self.segments)])
        if value == 0:
            return GridCell(occupied=False)
        return GridCell(occupied=True, kind=TetrominoType(value))

    def can_place_piece(self, piece: ActivePiece) -> bool:
        for segment, row in piece.blocks():
            if row < 0:
                return False
            if row >= self.rows:
                continue
            if self.cells[row, normalize(segment, self.segments)] != 0:
                return False
        return True

    def place_piece(self, piece: ActivePiece) -> int:
        """Write ``piece`` into the grid and return how many blocks stayed above it.

        The caller must have checked ``can_place_piece`` for this exact piece.
        """
        overflow = 0
        value = int(piece.kind)
        for segment, row in piece.blocks():
            if row >= self.rows:
                overflow += 1
                continue
            self.cells[row, normalize(segment, self.segments)] = value
        return overflow

    def check_complete_rings(self) -> List[int]:
        full_rows = np.where(np.all(self.cells != 0, axis=1))[0]
        return [int(r) for r in full_rows]

    def clear_rings(self, rows: Iterable[int]) -> int:
        """Remove ``rows`` in one compaction pass and return how many went.

        Rows above a cleared ring drop by the number of cleared rings below
        them; the vacated rings at the top are refilled empty.
        """
        targets = sorted({int(r) for r in rows if 0 <= int(r) < self.rows})
        if not targets:
            return 0
        num = len(targets)
        kept = np.delete(self.cells, targets, axis=0)
        new_rows = np.zeros((num, self.segments), dtype=np.int8)
        self.cells = np.vstack((kept, new_rows))
        logger.debug("Cleared rings %s", targets)
        return num

    def get_max_height(self) -> int:
        non_empty_rows = np.where(np.any(self.cells != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        return int(non_empty_rows[-1]) + 1

    def filled_ratio(self) -> float:
        return float(np.count_nonzero(self.cells)) / float(self.rows * self.segments)

    def clone_state(self) -> np.ndarray:
        return self.cells.copy()
