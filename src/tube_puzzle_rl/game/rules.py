from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .timing import resolve_fall_curve


@dataclass
class ScoringRules:
    line_clear_scores: Tuple[int, ...] = (0, 40, 100, 300, 1200)
    t_spin_scores: Tuple[int, ...] = (400, 800, 1200, 1600)
    t_spin_mini_scores: Tuple[int, ...] = (100, 200, 400)
    soft_drop_per_cell: int = 1
    hard_drop_per_cell: int = 2
    combo_bonus: int = 50
    lines_per_level: int = 10
    fall_curve: str = "linear"

    def __post_init__(self) -> None:
        if self.lines_per_level <= 0:
            raise ValueError("lines_per_level must be > 0")
        resolve_fall_curve(self.fall_curve)

    @staticmethod
    def _lookup(table: Tuple[int, ...], lines: int) -> int:
        if not table:
            return 0
        return table[min(max(lines, 0), len(table) - 1)]

    def line_score(self, lines: int, level: int) -> int:
        if lines <= 0:
            return 0
        return self._lookup(self.line_clear_scores, lines) * (level + 1)

    def t_spin_score(self, lines: int, level: int, mini: bool = False) -> int:
        table = self.t_spin_mini_scores if mini else self.t_spin_scores
        return self._lookup(table, max(0, lines)) * (level + 1)

    def fall_interval(self, level: int) -> float:
        return resolve_fall_curve(self.fall_curve)(level)


@dataclass(frozen=True)
class ScoreBreakdown:
    lines: int
    line_score: int
    t_spin_score: int
    combo_bonus: int
    drop_score: int

    @property
    def total(self) -> int:
        return self.line_score + self.t_spin_score + self.combo_bonus + self.drop_score


@dataclass
class ScoreKeeper:
    """Score, line and combo accounting for one session.

    ``level`` is derived from the cleared line count and is never stored.
    """

    rules: ScoringRules = field(default_factory=ScoringRules)
    score: int = 0
    lines_cleared: int = 0
    combo_count: int = 0
    last_award: Optional[ScoreBreakdown] = None

    @property
    def level(self) -> int:
        return self.lines_cleared // self.rules.lines_per_level

    def reset(self) -> None:
        self.score = 0
        self.lines_cleared = 0
        self.combo_count = 0
        self.last_award = None

    def fall_interval(self) -> float:
        return self.rules.fall_interval(self.level)

    def line_score(self, lines: int, level: Optional[int] = None) -> int:
        return self.rules.line_score(lines, self.level if level is None else level)

    def process_line_clear(
        self,
        lines_cleared: int,
        soft_drop_cells: int = 0,
        hard_drop_cells: int = 0,
        is_t_spin: bool = False,
        mini: bool = False,
    ) -> int:
        """Score one locked piece and return the points it earned.

        All multipliers use the level in effect before these lines count.
        """
        lines = max(0, int(lines_cleared))
        level = self.level

        if is_t_spin:
            line_points = 0
            t_spin_points = self.rules.t_spin_score(lines, level, mini=mini)
        else:
            line_points = self.rules.line_score(lines, level)
            t_spin_points = 0

        if lines > 0:
            combo_points = self.combo_count * self.rules.combo_bonus * (level + 1)
            self.combo_count += 1
        else:
            combo_points = 0
            self.combo_count = 0

        drop_points = (
            max(0, int(soft_drop_cells)) * self.rules.soft_drop_per_cell
            + max(0, int(hard_drop_cells)) * self.rules.hard_drop_per_cell
        )

        award = ScoreBreakdown(
            lines=lines,
            line_score=line_points,
            t_spin_score=t_spin_points,
            combo_bonus=combo_points,
            drop_score=drop_points,
        )
        self.score += award.total
        self.lines_cleared += lines
        self.last_award = award
        return award.total
