from __future__ import annotations

import pytest

from tube_puzzle_rl.game import ActivePiece, TetrominoType, kick_offsets, rotate_offsets
from tube_puzzle_rl.game.pieces import SHAPE_COLORS, SHAPE_OFFSETS, next_state, offsets_for


@pytest.mark.parametrize("kind", list(TetrominoType))
def test_shapes_fit_the_box(kind):
    offsets = SHAPE_OFFSETS[kind]
    assert len(set(offsets)) == 4
    assert all(0 <= x <= 3 and 0 <= y <= 3 for x, y in offsets)
    assert kind in SHAPE_COLORS


def test_rotation_maps():
    assert rotate_offsets(((0, 0),), clockwise=True) == ((0, 3),)
    assert rotate_offsets(((0, 0),), clockwise=False) == ((3, 0),)
    assert rotate_offsets(((3, 1),), clockwise=True) == ((1, 0),)


@pytest.mark.parametrize("kind", list(TetrominoType))
def test_four_turns_are_identity(kind):
    offsets = SHAPE_OFFSETS[kind]
    turned = offsets
    for _ in range(4):
        turned = rotate_offsets(turned, clockwise=True)
    assert set(turned) == set(offsets)
    assert set(rotate_offsets(rotate_offsets(offsets, True), False)) == set(offsets)


def test_o_piece_is_rotation_invariant():
    offsets = SHAPE_OFFSETS[TetrominoType.O]
    assert set(offsets_for(TetrominoType.O, 1)) == set(offsets)


def test_t_nub_points_right_after_clockwise_turn():
    # Nub starts up; a clockwise quarter turn points it along +segment
    assert set(offsets_for(TetrominoType.T, 1)) == {(1, 3), (1, 2), (1, 1), (2, 2)}


def test_state_cycles():
    assert [next_state(s, True) for s in range(4)] == [1, 2, 3, 0]
    assert [next_state(s, False) for s in range(4)] == [3, 0, 1, 2]


def test_kick_tables():
    assert kick_offsets(TetrominoType.O, 0, True) == [(0, 0)]
    assert kick_offsets(TetrominoType.I, 0, True)[1] == (-2, 0)
    assert kick_offsets(TetrominoType.T, 0, True)[1] == (-1, 0)
    assert kick_offsets(TetrominoType.T, 0, False)[1] == (1, 0)
    for kind in TetrominoType:
        for state in range(4):
            assert kick_offsets(kind, state, True)[0] == (0, 0)


def test_active_piece_moves_and_rotates():
    piece = ActivePiece(TetrominoType.O, segment=3, row=4)
    assert sorted(piece.blocks()) == [(4, 5), (4, 6), (5, 5), (5, 6)]
    moved = piece.moved(d_segment=-4, d_row=-1)
    assert moved.segment == -1 and moved.row == 3
    assert piece.rotated(False).rotation == 3
    assert piece.color == SHAPE_COLORS[TetrominoType.O]
