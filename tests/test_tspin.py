from __future__ import annotations

from tube_puzzle_rl.game import ActivePiece, TetrominoType, TSpin, TubeGrid, no_t_spin, three_corner_t_spin


def occupy(grid: TubeGrid, *cells) -> None:
    for segment, row in cells:
        grid.cells[row, segment % grid.segments] = int(TetrominoType.I)


def nub_down_t() -> ActivePiece:
    # Flat part on row 1 (segments 1-3), nub at (2, 0)
    piece = ActivePiece(TetrominoType.T, segment=0, row=-1, rotation=2)
    assert sorted(piece.blocks()) == [(1, 1), (2, 0), (2, 1), (3, 1)]
    return piece


def test_requires_t_and_rotation():
    grid = TubeGrid(8, 10)
    piece = nub_down_t()
    occupy(grid, (1, 0), (3, 0), (1, 2), (3, 2))
    assert three_corner_t_spin(grid, piece, False) == TSpin.NONE
    other = ActivePiece(TetrominoType.J, segment=0, row=-1, rotation=2)
    assert three_corner_t_spin(grid, other, True) == TSpin.NONE


def test_full_when_both_front_corners_filled():
    grid = TubeGrid(8, 10)
    occupy(grid, (1, 0), (3, 0), (1, 2))
    assert three_corner_t_spin(grid, nub_down_t(), True) == TSpin.FULL


def test_mini_when_one_front_corner_filled():
    grid = TubeGrid(8, 10)
    occupy(grid, (1, 0), (1, 2), (3, 2))
    assert three_corner_t_spin(grid, nub_down_t(), True) == TSpin.MINI


def test_two_corners_is_not_a_t_spin():
    grid = TubeGrid(8, 10)
    occupy(grid, (1, 0), (3, 0))
    assert three_corner_t_spin(grid, nub_down_t(), True) == TSpin.NONE


def test_floor_counts_as_filled_and_corners_wrap():
    grid = TubeGrid(8, 10)
    # Nub up, flat part on the floor across the seam: segments 7, 8, 9
    piece = ActivePiece(TetrominoType.T, segment=7, row=-1)
    occupy(grid, (7, 1))
    assert three_corner_t_spin(grid, piece, True) == TSpin.MINI
    occupy(grid, (9, 1))
    assert three_corner_t_spin(grid, piece, True) == TSpin.FULL


def test_no_t_spin():
    grid = TubeGrid(8, 10)
    assert no_t_spin(grid, nub_down_t(), True) == TSpin.NONE
