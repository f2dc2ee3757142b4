# Ray distance sensors
# FORBIDDEN: training.*, logging, any I/O

import numpy as np
from typing import Sequence

from ..core.math_utils import heading_vector, ray_segment_distances


class Sensor:
    """Fixed-angle ray measuring normalized distance to the nearest wall.

    output is 1.0 when nothing lies within range and 0.0 when touching a
    wall. endpoint is the nearest hit, or the ray tip when nothing is hit.
    """

    def __init__(self, angle: float, length: float = 150.0):
        self.angle = angle
        self.length = length
        self.output = 1.0
        self.endpoint = np.zeros(2, dtype=np.float64)

    def ray_end(self, origin: np.ndarray, facing_angle: float) -> np.ndarray:
        direction = facing_angle + self.angle
        return np.asarray(origin, dtype=np.float64) + self.length * heading_vector(direction)

    def cast(self, origin: np.ndarray, facing_angle: float, walls: np.ndarray) -> float:
        """Cast the ray from origin and update output and endpoint.

        Args:
            origin: Ray start, shape (2,)
            facing_angle: Heading of the owner in radians
            walls: Wall segments as [x1, y1, x2, y2], shape (M, 4)

        Returns:
            The new output value
        """
        end = self.ray_end(origin, facing_angle)
        distances = ray_segment_distances(origin, end, walls)
        self._record(origin, end, distances)
        return self.output

    def _record(self, origin: np.ndarray, end: np.ndarray, distances: np.ndarray) -> None:
        nearest = float(distances.min()) if distances.size else np.inf
        if nearest < self.length:
            self.endpoint = origin + (end - origin) * (nearest / self.length)
            self.output = min(1.0, max(0.0, nearest / self.length))
        else:
            self.endpoint = end
            self.output = 1.0


def cast_all(
    sensors: Sequence[Sensor],
    origin: np.ndarray,
    facing_angle: float,
    walls: np.ndarray,
) -> np.ndarray:
    """Cast every sensor in one vectorized pass.

    Equivalent to calling Sensor.cast on each sensor in turn.

    Returns:
        Sensor outputs in sensor order, shape (K,)
    """
    origin = np.asarray(origin, dtype=np.float64)
    ends = np.stack([sensor.ray_end(origin, facing_angle) for sensor in sensors])
    distances = ray_segment_distances(origin, ends, walls)
    for sensor, end, row in zip(sensors, ends, distances):
        sensor._record(origin, end, row)
    return np.array([sensor.output for sensor in sensors], dtype=np.float64)
