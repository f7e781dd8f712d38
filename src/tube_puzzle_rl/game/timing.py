"""Frame-rate independent timers used by the session.

All durations are in milliseconds.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional


logger = logging.getLogger(__name__)

LOCK_DELAY_MS = 500.0
MAX_RESETS = 15
DAS_MS = 167.0
ARR_MS = 33.0
FRAME_INTERVAL_MS = 1000.0 / 60.0


class LockDelayController:
    """Grace period a grounded piece gets before it settles.

    Moving or rotating restarts the timer, at most ``max_resets`` times per
    piece, so a player cannot stall forever.
    """

    def __init__(self, delay_ms: float = LOCK_DELAY_MS, max_resets: int = MAX_RESETS) -> None:
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        if max_resets < 0:
            raise ValueError("max_resets must be >= 0")
        self.delay_ms = float(delay_ms)
        self.max_resets = int(max_resets)
        self.timer = 0.0
        self.reset_count = 0

    def reset(self) -> None:
        self.timer = 0.0
        self.reset_count = 0

    def restart_timer(self) -> None:
        self.timer = 0.0

    def update(self, dt: float, piece_moved: bool) -> bool:
        """Advance by ``dt``; True means the piece must lock now."""
        if piece_moved and self.reset_count < self.max_resets:
            self.timer = 0.0
            self.reset_count += 1
            return False
        self.timer += dt
        return self.timer >= self.delay_ms


class GameClock:
    """Fixed-timestep accumulator.

    ``update`` runs ``tick`` once per whole ``frame_interval`` of real time,
    so the same input sequence always produces the same simulation.
    """

    def __init__(self, frame_interval: float = FRAME_INTERVAL_MS, max_ticks_per_update: int = 10) -> None:
        if frame_interval <= 0:
            raise ValueError("frame_interval must be > 0")
        if max_ticks_per_update <= 0:
            raise ValueError("max_ticks_per_update must be > 0")
        self.frame_interval = float(frame_interval)
        self.max_ticks_per_update = int(max_ticks_per_update)
        self.accumulator = 0.0

    def reset(self) -> None:
        self.accumulator = 0.0

    def update(self, real_dt: float, tick: Callable[[], None]) -> int:
        self.accumulator += max(0.0, float(real_dt))
        ticks = 0
        while self.accumulator >= self.frame_interval:
            if ticks >= self.max_ticks_per_update:
                dropped = self.accumulator - self.accumulator % self.frame_interval
                logger.debug("Clock backlog of %.1f ms dropped", dropped)
                self.accumulator %= self.frame_interval
                break
            tick()
            self.accumulator -= self.frame_interval
            ticks += 1
        return ticks


class InputTimer:
    """Delayed auto-shift / auto-repeat for one held input.

    The first press fires at once. Holding for ``initial_delay_ms`` fires
    again, then every ``repeat_interval_ms``. Releasing resets everything.
    """

    def __init__(self, initial_delay_ms: float = DAS_MS, repeat_interval_ms: float = ARR_MS) -> None:
        if initial_delay_ms < 0:
            raise ValueError("initial_delay_ms must be >= 0")
        if repeat_interval_ms <= 0:
            raise ValueError("repeat_interval_ms must be > 0")
        self.initial_delay_ms = float(initial_delay_ms)
        self.repeat_interval_ms = float(repeat_interval_ms)
        self.held = False
        self.hold_ms = 0.0
        self.repeat_ms = 0.0

    def reset(self) -> None:
        self.held = False
        self.hold_ms = 0.0
        self.repeat_ms = 0.0

    def update(self, dt: float, held: bool) -> int:
        """Return how many times the input fires during this ``dt``."""
        if not held:
            self.reset()
            return 0
        if not self.held:
            self.held = True
            self.hold_ms = 0.0
            self.repeat_ms = 0.0
            return 1

        previous = self.hold_ms
        self.hold_ms += dt
        if self.hold_ms < self.initial_delay_ms:
            return 0

        fired = 0
        if previous < self.initial_delay_ms:
            fired = 1
            self.repeat_ms = self.hold_ms - self.initial_delay_ms
        else:
            self.repeat_ms += dt
        repeats = int(self.repeat_ms // self.repeat_interval_ms)
        self.repeat_ms -= repeats * self.repeat_interval_ms
        return fired + repeats


def fall_interval_linear(level: int) -> float:
    return float(max(50, 1000 - level * 50))


def fall_interval_exponential(level: int) -> float:
    return float(max(50.0, 1000.0 * 0.9 ** level))


FallCurve = Callable[[int], float]


def resolve_fall_curve(name: Optional[str]) -> FallCurve:
    if name is None or name == "linear":
        return fall_interval_linear
    if name == "exponential":
        return fall_interval_exponential
    raise ValueError(f"Unknown fall curve: {name!r}")
