from __future__ import annotations

import pytest

from tube_puzzle_rl.game import GameClock, InputTimer, LockDelayController
from tube_puzzle_rl.game.timing import (
    fall_interval_exponential,
    fall_interval_linear,
    resolve_fall_curve,
)


class TestLockDelay:
    def test_locks_after_500ms_without_movement(self):
        lock = LockDelayController()
        for _ in range(4):
            assert not lock.update(100, False)
        assert lock.update(100, False)

    def test_movement_restarts_timer(self):
        lock = LockDelayController()
        assert not lock.update(400, False)
        assert not lock.update(16, True)
        assert lock.timer == 0
        assert not lock.update(499, False)
        assert lock.update(1, False)

    def test_reset_cap(self):
        lock = LockDelayController()
        for _ in range(15):
            assert not lock.update(10, True)
        assert lock.reset_count == 15
        assert not lock.update(499, True)
        assert lock.update(1, True)
        assert lock.reset_count == 15

    def test_never_exceeds_cap_under_constant_movement(self):
        lock = LockDelayController()
        locked_at = None
        for i in range(200):
            if lock.update(16, True):
                locked_at = i
                break
            assert lock.reset_count <= 15
        assert locked_at is not None

    def test_reset_and_restart_timer(self):
        lock = LockDelayController()
        lock.update(5, True)
        lock.update(200, False)
        lock.restart_timer()
        assert lock.timer == 0 and lock.reset_count == 1
        lock.reset()
        assert lock.timer == 0 and lock.reset_count == 0


class TestGameClock:
    def test_runs_whole_intervals(self):
        clock = GameClock(frame_interval=10)
        ticks = []
        assert clock.update(35, lambda: ticks.append(1)) == 3
        assert clock.accumulator == pytest.approx(5)
        assert clock.update(5, lambda: ticks.append(1)) == 1
        assert len(ticks) == 4

    def test_same_total_time_same_ticks(self):
        a = GameClock(frame_interval=10)
        b = GameClock(frame_interval=10)
        count_a = sum(a.update(dt, lambda: None) for dt in (7, 7, 7, 7, 7, 5))
        count_b = b.update(40, lambda: None)
        assert count_a == count_b == 4

    def test_backlog_is_bounded(self):
        clock = GameClock(frame_interval=10, max_ticks_per_update=3)
        assert clock.update(100, lambda: None) == 3
        assert clock.accumulator < 10

    def test_invalid(self):
        with pytest.raises(ValueError):
            GameClock(frame_interval=0)


class TestInputTimer:
    def test_first_press_fires_immediately(self):
        timer = InputTimer()
        assert timer.update(16, True) == 1

    def test_delay_then_repeat(self):
        timer = InputTimer(167, 33)
        assert timer.update(0, True) == 1
        for _ in range(16):
            assert timer.update(10, True) == 0
        assert timer.update(10, True) == 1  # 170ms held
        assert timer.update(10, True) == 0
        assert timer.update(10, True) == 0
        assert timer.update(10, True) == 1  # 200ms held

    def test_release_resets(self):
        timer = InputTimer()
        timer.update(0, True)
        timer.update(100, True)
        assert timer.update(5, False) == 0
        assert timer.hold_ms == 0 and timer.repeat_ms == 0
        assert timer.update(5, True) == 1

    def test_long_frame_reports_every_repeat(self):
        timer = InputTimer(167, 33)
        timer.update(0, True)
        assert timer.update(167 + 99, True) == 4

    @pytest.mark.parametrize("dt", [5, 10, 20, 50])
    def test_frame_rate_independent(self, dt):
        timer = InputTimer(167, 33)
        fired = timer.update(0, True)
        for _ in range(500 // dt):
            fired += timer.update(dt, True)
        assert fired == 12

    def test_invalid(self):
        with pytest.raises(ValueError):
            InputTimer(repeat_interval_ms=0)


def test_fall_curves():
    assert fall_interval_linear(0) == 1000
    assert fall_interval_linear(10) == 500
    assert fall_interval_linear(19) == 50
    assert fall_interval_linear(40) == 50
    assert fall_interval_exponential(0) == 1000
    assert fall_interval_exponential(1) == pytest.approx(900)
    assert fall_interval_exponential(100) == 50
    assert resolve_fall_curve("exponential") is fall_interval_exponential
    with pytest.raises(ValueError):
        resolve_fall_curve("cubic")
