from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Tuple


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Offset = Tuple[int, int]

# Block offsets inside a 4x4 box, (x, y) with x along the segments and y up the tube.
SHAPE_OFFSETS: Dict[TetrominoType, Tuple[Offset, ...]] = {
    TetrominoType.I: ((0, 2), (1, 2), (2, 2), (3, 2)),
    TetrominoType.O: ((1, 1), (2, 1), (1, 2), (2, 2)),
    TetrominoType.T: ((0, 1), (1, 1), (2, 1), (1, 2)),
    TetrominoType.S: ((0, 1), (1, 1), (1, 2), (2, 2)),
    TetrominoType.Z: ((0, 2), (1, 2), (1, 1), (2, 1)),
    TetrominoType.J: ((0, 2), (0, 1), (1, 1), (2, 1)),
    TetrominoType.L: ((2, 2), (0, 1), (1, 1), (2, 1)),
}

SHAPE_COLORS: Dict[TetrominoType, Tuple[int, int, int]] = {
    TetrominoType.I: (0, 240, 240),
    TetrominoType.O: (240, 240, 0),
    TetrominoType.T: (160, 0, 240),
    TetrominoType.S: (0, 240, 0),
    TetrominoType.Z: (240, 0, 0),
    TetrominoType.J: (0, 0, 240),
    TetrominoType.L: (240, 160, 0),
}

BOX_CENTER = 1.5

# SRS kick tables keyed by (from_state, to_state); dy is positive upwards.
JLSTZ_KICKS: Dict[Tuple[int, int], List[Offset]] = {
    (0, 1): [(0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)],
    (1, 0): [(0, 0), (1, 0), (1, -1), (0, 2), (1, 2)],
    (1, 2): [(0, 0), (1, 0), (1, -1), (0, 2), (1, 2)],
    (2, 1): [(0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)],
    (2, 3): [(0, 0), (1, 0), (1, 1), (0, -2), (1, -2)],
    (3, 2): [(0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)],
    (3, 0): [(0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)],
    (0, 3): [(0, 0), (1, 0), (1, 1), (0, -2), (1, -2)],
}
I_KICKS: Dict[Tuple[int, int], List[Offset]] = {
    (0, 1): [(0, 0), (-2, 0), (1, 0), (-2, -1), (1, 2)],
    (1, 0): [(0, 0), (2, 0), (-1, 0), (2, 1), (-1, -2)],
    (1, 2): [(0, 0), (-1, 0), (2, 0), (-1, 2), (2, -1)],
    (2, 1): [(0, 0), (1, 0), (-2, 0), (1, -2), (-2, 1)],
    (2, 3): [(0, 0), (2, 0), (-1, 0), (2, 1), (-1, -2)],
    (3, 2): [(0, 0), (-2, 0), (1, 0), (-2, -1), (1, 2)],
    (3, 0): [(0, 0), (1, 0), (-2, 0), (1, -2), (-2, 1)],
    (0, 3): [(0, 0), (-1, 0), (2, 0), (-1, 2), (2, -1)],
}


def next_state(state: int, clockwise: bool) -> int:
    return (state + (1 if clockwise else -1)) % 4


def rotate_offsets(offsets: Tuple[Offset, ...], clockwise: bool = True) -> Tuple[Offset, ...]:
    """Rotate box offsets a quarter turn about the box center (1.5, 1.5)."""
    rotated: List[Offset] = []
    for x, y in offsets:
        cx = x - BOX_CENTER
        cy = y - BOX_CENTER
        if clockwise:
            rx, ry = cy, -cx
        else:
            rx, ry = -cy, cx
        rotated.append((int(rx + BOX_CENTER), int(ry + BOX_CENTER)))
    return tuple(rotated)


def offsets_for(kind: TetrominoType, rotation: int) -> Tuple[Offset, ...]:
    offsets = SHAPE_OFFSETS[kind]
    for _ in range(rotation % 4):
        offsets = rotate_offsets(offsets, clockwise=True)
    return offsets


def kick_offsets(kind: TetrominoType, state: int, clockwise: bool) -> List[Offset]:
    """Ordered (d_segment, d_row) candidates for rotating out of ``state``."""
    if kind == TetrominoType.O:
        return [(0, 0)]
    table = I_KICKS if kind == TetrominoType.I else JLSTZ_KICKS
    return table.get((state % 4, next_state(state, clockwise)), [(0, 0)])


@dataclass(frozen=True)
class ActivePiece:
    kind: TetrominoType
    segment: int
    row: int
    rotation: int = 0  # 0..3

    @property
    def color(self) -> Tuple[int, int, int]:
        return SHAPE_COLORS[self.kind]

    def offsets(self) -> Tuple[Offset, ...]:
        return offsets_for(self.kind, self.rotation)

    def blocks(self) -> List[Tuple[int, int]]:
        """Absolute (segment, row) of each block; segments are not wrapped."""
        return [(self.segment + dx, self.row + dy) for dx, dy in self.offsets()]

    def moved(self, d_segment: int = 0, d_row: int = 0) -> "ActivePiece":
        return replace(self, segment=self.segment + d_segment, row=self.row + d_row)

    def rotated(self, clockwise: bool = True) -> "ActivePiece":
        return replace(self, rotation=next_state(self.rotation, clockwise))
