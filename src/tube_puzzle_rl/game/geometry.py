from __future__ import annotations

import math
from typing import NamedTuple, Sequence

import numpy as np


class TubePosition(NamedTuple):
    segment: int
    row: int


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class TubeGeometry:
    """Maps cyclic tube cells to render-space points and back.

    Segment 0 sits on the positive X axis and angles grow towards positive Z.
    Row 0 is the bottom ring; the tube is centered vertically on the origin.
    The simulation never uses this class, it exists for renderers.
    """

    def __init__(self, radius: float = 5.0, height: float = 20.0, segments: int = 16) -> None:
        if int(segments) <= 0:
            raise ValueError("segments must be > 0")
        if height < 0:
            raise ValueError("height must be >= 0")
        if radius < 0:
            raise ValueError("radius must be >= 0")
        self.radius = float(radius)
        self.height = float(height)
        self.segments = int(segments)

    def segment_angle(self, segment: float) -> float:
        # No wrapping: fractional and out-of-range segments map to their exact angle
        return 2.0 * math.pi * segment / self.segments

    def tube_to_world(self, segment: float, row: float) -> np.ndarray:
        theta = self.segment_angle(segment)
        return np.array(
            [
                self.radius * math.cos(theta),
                row - self.height / 2.0,
                self.radius * math.sin(theta),
            ],
            dtype=np.float64,
        )

    def tube_to_world_many(self, cells: np.ndarray | Sequence[Sequence[float]]) -> np.ndarray:
        """Vectorized ``tube_to_world`` over an ``(N, 2)`` array of (segment, row)."""
        arr = np.asarray(cells, dtype=np.float64).reshape(-1, 2)
        theta = 2.0 * np.pi * arr[:, 0] / self.segments
        out = np.empty((arr.shape[0], 3), dtype=np.float64)
        out[:, 0] = self.radius * np.cos(theta)
        out[:, 1] = arr[:, 1] - self.height / 2.0
        out[:, 2] = self.radius * np.sin(theta)
        return out

    def world_to_tube(self, position: np.ndarray | Sequence[float]) -> TubePosition:
        """Nearest tube cell for a world position.

        Lossy: points off the tube surface (another radius, between rows)
        are rounded to the closest integer cell.
        """
        x, y, z = (float(v) for v in position)
        theta = math.atan2(z, x)
        if theta < 0:
            theta += 2.0 * math.pi
        segment = _round_half_up(theta / (2.0 * math.pi) * self.segments) % self.segments
        row = _round_half_up(y + self.height / 2.0)
        return TubePosition(segment, row)
