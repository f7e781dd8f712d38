from __future__ import annotations

import pytest

from tube_puzzle_rl.game import ScoreKeeper, ScoringRules


@pytest.fixture
def keeper() -> ScoreKeeper:
    return ScoreKeeper()


def test_line_score_table(keeper):
    assert keeper.line_score(4, 0) == 1200
    assert keeper.line_score(1, 0) == 40
    assert keeper.line_score(2, 3) == 400
    for level in range(0, 30, 7):
        assert keeper.line_score(0, level) == 0


def test_combo_bonus_sequence(keeper):
    awards = [keeper.process_line_clear(1) for _ in range(3)]
    assert awards == [40, 90, 140]
    assert keeper.last_award.combo_bonus == 100
    assert keeper.combo_count == 3


def test_zero_line_turn_breaks_combo(keeper):
    keeper.process_line_clear(1)
    keeper.process_line_clear(1)
    assert keeper.process_line_clear(0) == 0
    assert keeper.combo_count == 0
    assert keeper.process_line_clear(1) == 40


def test_level_is_derived_and_uses_pre_clear_multiplier(keeper):
    keeper.process_line_clear(4)
    keeper.process_line_clear(4)
    assert keeper.level == 0
    assert keeper.process_line_clear(4) == 1200 + 100
    assert keeper.lines_cleared == 12
    assert keeper.level == 1
    assert keeper.score == 1200 + 1250 + 1300
    assert keeper.process_line_clear(1) == 40 * 2 + 3 * 50 * 2


def test_drop_points(keeper):
    assert keeper.process_line_clear(0, soft_drop_cells=3, hard_drop_cells=5) == 13
    assert keeper.last_award.drop_score == 13


def test_t_spin_tables(keeper):
    assert keeper.process_line_clear(0, is_t_spin=True) == 400
    assert keeper.combo_count == 0
    assert keeper.process_line_clear(1, is_t_spin=True) == 800
    assert keeper.last_award.line_score == 0
    assert keeper.process_line_clear(1, is_t_spin=True, mini=True) == 200 + 50


def test_fall_interval_follows_level():
    linear = ScoreKeeper()
    assert linear.fall_interval() == 1000
    linear.lines_cleared = 25
    assert linear.fall_interval() == 900

    exponential = ScoreKeeper(ScoringRules(fall_curve="exponential"))
    exponential.lines_cleared = 10
    assert exponential.fall_interval() == pytest.approx(900)


def test_invalid_rules():
    with pytest.raises(ValueError):
        ScoringRules(fall_curve="bogus")
    with pytest.raises(ValueError):
        ScoringRules(lines_per_level=0)


def test_reset(keeper):
    keeper.process_line_clear(2, soft_drop_cells=4)
    keeper.reset()
    assert (keeper.score, keeper.lines_cleared, keeper.combo_count, keeper.level) == (0, 0, 0, 0)
    assert keeper.last_award is None
