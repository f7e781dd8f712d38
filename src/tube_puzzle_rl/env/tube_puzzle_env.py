from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from tube_puzzle_rl.game import Command, GameConfig, GameSession, GameStatus, ScoringRules, SevenBag
from tube_puzzle_rl.game.core import DIRECTIONAL_COMMANDS
from tube_puzzle_rl.game.grid import EMPTY_COLOR
from tube_puzzle_rl.game.pieces import SHAPE_COLORS


# Action index -> command tapped for that step (None does nothing)
ACTIONS: Tuple[Optional[Command], ...] = (
    None,
    Command.ROTATE_TUBE_LEFT,
    Command.ROTATE_TUBE_RIGHT,
    Command.SOFT_DROP,
    Command.HARD_DROP,
    Command.ROTATE_PIECE,
    Command.ROTATE_PIECE_CCW,
)


class TubePuzzleEnv(gym.Env):
    """Drives a ``GameSession`` one tapped command per step.

    Every step advances the session by ``step_ms`` of simulated time, so
    gravity and lock delay run exactly as they would for a human player.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 10}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        render_mode: Optional[str] = None,
        step_ms: float = 100.0,
        max_episode_steps: int = 10000,
        terminal_penalty: float = 0.0,
    ) -> None:
        super().__init__()
        self.session = GameSession(config, rules)
        self.render_mode = render_mode
        self.step_ms = float(step_ms)
        self.max_episode_steps = int(max_episode_steps)
        self.terminal_penalty = float(terminal_penalty)

        rows = self.session.grid.rows
        segments = self.session.grid.segments
        kinds = len(SHAPE_COLORS)
        self.observation_space = spaces.Box(low=-kinds, high=kinds, shape=(rows, segments), dtype=np.int8)
        self.action_space = spaces.Discrete(len(ACTIONS))

        self._steps = 0

    def _get_obs(self) -> np.ndarray:
        return self.session.get_state().astype(np.int8)

    def _get_info(self) -> Dict[str, Any]:
        snap = self.session.snapshot()
        return {
            "score": snap.score,
            "level": snap.level,
            "lines_cleared": snap.lines_cleared,
            "combo_count": snap.combo_count,
            "max_height": self.session.grid.get_max_height(),
            "filled_ratio": self.session.grid.filled_ratio(),
            "next_piece": int(snap.next_piece) if snap.next_piece is not None else 0,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        self.session.piece_source = SevenBag(int(self.np_random.integers(0, 2**31 - 1)))
        self.session.restart()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        command = ACTIONS[int(action)]
        score_before = self.session.score

        if command is not None:
            self.session.press(command)
        self.session.tick(self.step_ms)
        if command in DIRECTIONAL_COMMANDS:
            self.session.release(command)

        self._steps += 1
        terminated = self.session.status == GameStatus.GAME_OVER
        truncated = self._steps >= self.max_episode_steps

        reward = float(self.session.score - score_before)
        if terminated:
            reward += self.terminal_penalty

        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        # Unrolled tube, bottom ring drawn last
        state = np.flipud(self.session.get_state())
        cell = 12
        h, w = state.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                v = abs(int(state[y, x]))
                color = SHAPE_COLORS[v] if v else EMPTY_COLOR
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass
