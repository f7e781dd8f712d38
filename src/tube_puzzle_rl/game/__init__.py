"""Game module for Tube Puzzle RL.

Exports the core engine and supporting classes:
- TubeGeometry: tube <-> world coordinate mapping for renderers
- TubeGrid: cyclic occupancy grid with ring detection and clearing
- ActivePiece / TetrominoType: the seven pieces, rotation and wall kicks
- LockDelayController, GameClock, InputTimer: frame-rate independent timers
- ScoringRules / ScoreKeeper: score, level and combo accounting
- GameSession: state machine tying everything together
"""

from .geometry import TubeGeometry, TubePosition
from .grid import GridCell, TubeGrid, normalize
from .pieces import ActivePiece, TetrominoType, kick_offsets, rotate_offsets
from .randomizer import SevenBag
from .rules import ScoreBreakdown, ScoreKeeper, ScoringRules
from .timing import GameClock, InputTimer, LockDelayController
from .tspin import TSpin, no_t_spin, three_corner_t_spin
from .core import Command, GameConfig, GameSession, GameSnapshot, GameStatus

__all__ = [
    "TubeGeometry",
    "TubePosition",
    "GridCell",
    "TubeGrid",
    "normalize",
    "ActivePiece",
    "TetrominoType",
    "kick_offsets",
    "rotate_offsets",
    "SevenBag",
    "ScoreBreakdown",
    "ScoreKeeper",
    "ScoringRules",
    "GameClock",
    "InputTimer",
    "LockDelayController",
    "TSpin",
    "no_t_spin",
    "three_corner_t_spin",
    "Command",
    "GameConfig",
    "GameSession",
    "GameSnapshot",
    "GameStatus",
]
