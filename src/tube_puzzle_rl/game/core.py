from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Set, Tuple

import numpy as np

from .geometry import TubeGeometry
from .grid import TubeGrid, normalize
from .pieces import ActivePiece, TetrominoType, kick_offsets
from .randomizer import PieceSource, SevenBag
from .rules import ScoreKeeper, ScoringRules
from .timing import (
    ARR_MS,
    DAS_MS,
    FRAME_INTERVAL_MS,
    LOCK_DELAY_MS,
    MAX_RESETS,
    GameClock,
    InputTimer,
    LockDelayController,
)
from .tspin import TSpin, TSpinDetector, three_corner_t_spin


logger = logging.getLogger(__name__)


class GameStatus(str, Enum):
    MENU = "MENU"
    PLAYING = "PLAYING"
    PAUSED = "PAUSED"
    GAME_OVER = "GAME_OVER"


class Command(IntEnum):
    ROTATE_TUBE_LEFT = 0
    ROTATE_TUBE_RIGHT = 1
    SOFT_DROP = 2
    HARD_DROP = 3
    ROTATE_PIECE = 4
    ROTATE_PIECE_CCW = 5
    PAUSE = 6
    RESTART = 7
    START = 8
    MENU = 9


# Held inputs, fed through an InputTimer each simulation step
DIRECTIONAL_COMMANDS = (Command.ROTATE_TUBE_LEFT, Command.ROTATE_TUBE_RIGHT, Command.SOFT_DROP)
CONTROL_COMMANDS = (Command.PAUSE, Command.RESTART, Command.START, Command.MENU)


@dataclass
class GameConfig:
    segments: int = 16
    rows: int = 20
    radius: float = 5.0
    frame_interval_ms: float = FRAME_INTERVAL_MS
    lock_delay_ms: float = LOCK_DELAY_MS
    max_lock_resets: int = MAX_RESETS
    das_ms: float = DAS_MS
    arr_ms: float = ARR_MS
    soft_drop_delay_ms: float = 0.0
    soft_drop_interval_ms: float = ARR_MS
    spawn_segment: int = 0
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.segments <= 0 or self.rows <= 0:
            raise ValueError("Tube segments/rows must be > 0")


@dataclass(frozen=True)
class GameSnapshot:
    score: int
    level: int
    lines_cleared: int
    status: GameStatus
    fall_timer: float
    combo_count: int
    next_piece: Optional[TetrominoType]
    tube_rotation: int
    active_piece: Optional[ActivePiece]
    active_blocks: Tuple[Tuple[int, int], ...]
    grid: np.ndarray = field(compare=False)


class GameSession:
    """Cylindrical falling-block game driven by a host frame loop.

    The host calls ``press``/``release`` for input and ``tick(delta_ms)``
    once per frame, then reads ``snapshot()`` to draw. Simulation only
    advances while PLAYING.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        piece_source: Optional[PieceSource] = None,
        t_spin_detector: Optional[TSpinDetector] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.grid = TubeGrid(self.config.segments, self.config.rows)
        self.geometry = TubeGeometry(self.config.radius, float(self.config.rows), self.config.segments)
        self.scorer = ScoreKeeper(rules or ScoringRules())
        self.piece_source: PieceSource = piece_source or SevenBag(self.config.random_seed)
        self.t_spin_detector: TSpinDetector = t_spin_detector or three_corner_t_spin
        self.clock = GameClock(self.config.frame_interval_ms)
        self.lock_delay = LockDelayController(self.config.lock_delay_ms, self.config.max_lock_resets)
        self.input_timers: Dict[Command, InputTimer] = {
            Command.ROTATE_TUBE_LEFT: InputTimer(self.config.das_ms, self.config.arr_ms),
            Command.ROTATE_TUBE_RIGHT: InputTimer(self.config.das_ms, self.config.arr_ms),
            Command.SOFT_DROP: InputTimer(self.config.soft_drop_delay_ms, self.config.soft_drop_interval_ms),
        }

        self.status = GameStatus.MENU
        self.active: Optional[ActivePiece] = None
        self.next_kind: Optional[TetrominoType] = None
        self.fall_timer = 0.0
        self.tube_rotation = 0
        self._held: Set[Command] = set()
        self._tapped: Set[Command] = set()
        self._pending: List[Command] = []
        self._soft_drop_cells = 0
        self._hard_drop_cells = 0
        self._rotated_last = False

    # ------------------------------------------------------------------
    # Observable state

    @property
    def score(self) -> int:
        return self.scorer.score

    @property
    def level(self) -> int:
        return self.scorer.level

    @property
    def lines_cleared(self) -> int:
        return self.scorer.lines_cleared

    def snapshot(self) -> GameSnapshot:
        blocks: Tuple[Tuple[int, int], ...] = ()
        if self.active is not None:
            blocks = tuple((normalize(s, self.grid.segments), r) for s, r in self.active.blocks())
        return GameSnapshot(
            score=self.scorer.score,
            level=self.scorer.level,
            lines_cleared=self.scorer.lines_cleared,
            status=self.status,
            fall_timer=self.fall_timer,
            combo_count=self.scorer.combo_count,
            next_piece=self.next_kind,
            tube_rotation=self.tube_rotation,
            active_piece=self.active,
            active_blocks=blocks,
            grid=self.grid.clone_state(),
        )

    def active_world_blocks(self) -> np.ndarray:
        """World-space centers of the falling piece's blocks, shape ``(N, 3)``."""
        blocks = self.snapshot().active_blocks
        if not blocks:
            return np.empty((0, 3), dtype=np.float64)
        return self.geometry.tube_to_world_many(blocks)

    def get_state(self) -> np.ndarray:
        # Grid copy with the falling piece overlaid as negative kind values
        state = self.grid.clone_state()
        if self.active is not None:
            for segment, row in self.active.blocks():
                if 0 <= row < self.grid.rows:
                    state[row, normalize(segment, self.grid.segments)] = -int(self.active.kind)
        return state

    # ------------------------------------------------------------------
    # Input surface

    def press(self, command: Command) -> bool:
        """Feed one input event. Returns False when the current state ignores it."""
        command = Command(command)
        if command in CONTROL_COMMANDS:
            accepted = self._control(command)
            if not accepted:
                logger.debug("Ignoring %s while %s", command.name, self.status.value)
            return accepted
        if self.status != GameStatus.PLAYING:
            logger.debug("Ignoring %s while %s", command.name, self.status.value)
            return False
        if command in DIRECTIONAL_COMMANDS:
            if command not in self._held:
                # A fresh press always gets its immediate first trigger
                self.input_timers[command].reset()
            self._held.add(command)
            self._tapped.add(command)
        else:
            self._pending.append(command)
        return True

    def release(self, command: Command) -> None:
        self._held.discard(Command(command))

    def _control(self, command: Command) -> bool:
        if command == Command.PAUSE:
            return self.toggle_pause()
        if command == Command.RESTART:
            self.restart()
            return True
        if command == Command.START:
            return self.start()
        return self.go_to_menu()

    # ------------------------------------------------------------------
    # State machine

    def start(self) -> bool:
        if self.status != GameStatus.MENU:
            return False
        self._reset_state()
        self.status = GameStatus.PLAYING
        logger.info("Game started")
        self._spawn()
        return True

    def restart(self) -> None:
        self._reset_state()
        self.status = GameStatus.PLAYING
        logger.info("Game restarted")
        self._spawn()

    def toggle_pause(self) -> bool:
        if self.status == GameStatus.PLAYING:
            self.status = GameStatus.PAUSED
        elif self.status == GameStatus.PAUSED:
            self.status = GameStatus.PLAYING
        else:
            return False
        # Held keys are re-read after a pause instead of bursting repeats
        self._held.clear()
        self._tapped.clear()
        for timer in self.input_timers.values():
            timer.reset()
        return True

    def go_to_menu(self) -> bool:
        if self.status != GameStatus.GAME_OVER:
            return False
        self._reset_state()
        self.status = GameStatus.MENU
        return True

    def _reset_state(self) -> None:
        self.grid.clear()
        self.scorer.reset()
        self.lock_delay.reset()
        self.clock.reset()
        for timer in self.input_timers.values():
            timer.reset()
        self._held.clear()
        self._tapped.clear()
        self._pending.clear()
        self.fall_timer = 0.0
        self.tube_rotation = 0
        self.active = None
        self.next_kind = None
        self._soft_drop_cells = 0
        self._hard_drop_cells = 0
        self._rotated_last = False

    def _game_over(self) -> None:
        self.active = None
        self._pending.clear()
        self.status = GameStatus.GAME_OVER
        logger.info("Game over: score=%d lines=%d", self.scorer.score, self.scorer.lines_cleared)

    def _spawn(self) -> None:
        kind = self.next_kind if self.next_kind is not None else self.piece_source.next_piece()
        self.next_kind = self.piece_source.next_piece()
        piece = ActivePiece(
            kind=kind,
            segment=self.config.spawn_segment + self.tube_rotation,
            row=self.grid.rows - 3,
        )
        self.lock_delay.reset()
        self.fall_timer = 0.0
        self._soft_drop_cells = 0
        self._hard_drop_cells = 0
        self._rotated_last = False
        if not self.grid.can_place_piece(piece):
            self._game_over()
            return
        self.active = piece

    # ------------------------------------------------------------------
    # Simulation

    def tick(self, delta_ms: float) -> int:
        """Advance the host frame by ``delta_ms``; returns simulation steps run."""
        if self.status != GameStatus.PLAYING:
            return 0
        return self.clock.update(delta_ms, self._step)

    def _step(self) -> None:
        if self.status != GameStatus.PLAYING or self.active is None:
            return
        dt = self.clock.frame_interval
        moved = False

        pending, self._pending = self._pending, []
        for command in pending:
            if command == Command.HARD_DROP:
                self.hard_drop()
                return
            if command == Command.ROTATE_PIECE:
                moved |= self.rotate_piece(clockwise=True)
            elif command == Command.ROTATE_PIECE_CCW:
                moved |= self.rotate_piece(clockwise=False)

        tapped, self._tapped = self._tapped, set()
        for command in DIRECTIONAL_COMMANDS:
            timer = self.input_timers[command]
            if command in tapped and command not in self._held:
                # Pressed and released between steps
                fires = 1
                timer.reset()
            else:
                fires = timer.update(dt, command in self._held)
            for _ in range(fires):
                if command == Command.SOFT_DROP:
                    self.soft_drop()
                else:
                    moved |= self.rotate_tube(-1 if command == Command.ROTATE_TUBE_LEFT else 1)

        self.fall_timer += dt
        interval = self.scorer.fall_interval()
        while self.fall_timer >= interval:
            self.fall_timer -= interval
            if not self._try_move(0, -1):
                self.fall_timer = 0.0
                break

        if self.active is None:
            return
        if self.grid.can_place_piece(self.active.moved(d_row=-1)):
            self.lock_delay.restart_timer()
        elif self.lock_delay.update(dt, moved):
            self._lock_active()

    def _try_move(self, d_segment: int, d_row: int) -> bool:
        if self.active is None:
            return False
        candidate = self.active.moved(d_segment, d_row)
        if not self.grid.can_place_piece(candidate):
            return False
        self.active = candidate
        self._rotated_last = False
        return True

    def rotate_tube(self, direction: int) -> bool:
        """Steer the piece one segment around the tube; False when blocked."""
        if not self._try_move(direction, 0):
            return False
        self.tube_rotation += direction
        return True

    def rotate_piece(self, clockwise: bool = True) -> bool:
        """Rotate with wall kicks. A rotation with no free kick is rejected."""
        if self.active is None:
            return False
        rotated = self.active.rotated(clockwise)
        for d_segment, d_row in kick_offsets(self.active.kind, self.active.rotation, clockwise):
            candidate = rotated.moved(d_segment, d_row)
            if self.grid.can_place_piece(candidate):
                self.active = candidate
                self._rotated_last = True
                return True
        return False

    def soft_drop(self) -> bool:
        if not self._try_move(0, -1):
            return False
        self._soft_drop_cells += 1
        return True

    def hard_drop(self) -> int:
        if self.active is None:
            return 0
        cells = 0
        while self._try_move(0, -1):
            cells += 1
        self._hard_drop_cells += cells
        self._lock_active()
        return cells

    def _lock_active(self) -> None:
        piece = self.active
        if piece is None:
            return
        t_spin = self.t_spin_detector(self.grid, piece, self._rotated_last)
        overflow = self.grid.place_piece(piece)
        self.active = None

        rings = self.grid.check_complete_rings()
        if rings:
            self.grid.clear_rings(rings)
        self.scorer.process_line_clear(
            len(rings),
            soft_drop_cells=self._soft_drop_cells,
            hard_drop_cells=self._hard_drop_cells,
            is_t_spin=t_spin != TSpin.NONE,
            mini=t_spin == TSpin.MINI,
        )

        if overflow == len(piece.blocks()):
            # Locked entirely above the tube
            self._game_over()
            return
        self._spawn()
