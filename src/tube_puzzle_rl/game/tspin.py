"""Replaceable T-spin predicates.

A detector gets the grid, the piece about to lock and whether the last
successful action on it was a rotation, and classifies the lock.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, List, Tuple

from .grid import TubeGrid
from .pieces import ActivePiece, TetrominoType


class TSpin(str, Enum):
    NONE = "none"
    MINI = "mini"
    FULL = "full"


TSpinDetector = Callable[[TubeGrid, ActivePiece, bool], TSpin]


def no_t_spin(grid: TubeGrid, piece: ActivePiece, rotated_last: bool) -> TSpin:
    return TSpin.NONE


def _center_and_nub(blocks: List[Tuple[int, int]]) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    occupied = set(blocks)
    for cs, cr in blocks:
        neighbours = [(s, r) for s, r in blocks if abs(s - cs) + abs(r - cr) == 1]
        if len(neighbours) != 3:
            continue
        for ns, nr in neighbours:
            if (2 * cs - ns, 2 * cr - nr) not in occupied:
                return (cs, cr), (ns - cs, nr - cr)
    raise ValueError("piece is not T-shaped")


def three_corner_t_spin(grid: TubeGrid, piece: ActivePiece, rotated_last: bool) -> TSpin:
    """Classic three-corner rule around the T's center block.

    The floor counts as filled, the spawn buffer above the tube as empty.
    Both corners on the nub side filled gives a full T-spin, otherwise mini.
    """
    if piece.kind != TetrominoType.T or not rotated_last:
        return TSpin.NONE

    (cs, cr), (ds, dr) = _center_and_nub(piece.blocks())

    def blocked(segment: int, row: int) -> bool:
        return row < 0 or grid.is_occupied(segment, row)

    corners = [(cs - 1, cr - 1), (cs + 1, cr - 1), (cs - 1, cr + 1), (cs + 1, cr + 1)]
    if sum(blocked(s, r) for s, r in corners) < 3:
        return TSpin.NONE

    if ds != 0:
        front = [(cs + ds, cr - 1), (cs + ds, cr + 1)]
    else:
        front = [(cs - 1, cr + dr), (cs + 1, cr + dr)]
    if all(blocked(s, r) for s, r in front):
        return TSpin.FULL
    return TSpin.MINI
