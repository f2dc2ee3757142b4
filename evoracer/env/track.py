# Corridor tracks built from a center path
# FORBIDDEN: training.*, logging, any I/O

import numpy as np
from typing import List, Optional, Sequence, Tuple

from ..core.types import Checkpoint, LineSegment
from ..core.math_utils import normalize_vector, point_segment_distances

Point = Tuple[float, float]


# Built-in courses: (name, center path, start position, start angle).
# None for the start pose means path[0] and the direction to path[1].
COURSES: List[Tuple[str, List[Point], Optional[Point], Optional[float]]] = [
    (
        "oval",
        [
            (160, 450), (160, 350), (160, 280),
            (200, 220), (280, 180), (380, 160),
            (500, 160), (620, 160),
            (720, 180), (800, 240), (840, 320),
            (850, 420), (840, 520),
            (800, 600), (720, 660), (620, 680),
            (500, 680), (380, 680),
            (280, 660), (200, 600), (160, 520),
        ],
        (160, 450),
        -np.pi / 2,
    ),
    (
        "s_curve",
        [
            (100, 350), (150, 280), (220, 220), (320, 180), (450, 160),
            (580, 180), (680, 240), (740, 320), (760, 420),
            (740, 520), (680, 600), (580, 650),
            (450, 670), (320, 650),
            (220, 600), (150, 520), (120, 430),
        ],
        (100, 350),
        -np.pi / 4,
    ),
    (
        "hairpins",
        [
            (100, 650), (100, 550), (100, 450), (100, 350),
            (110, 300), (130, 250), (170, 210), (220, 190), (280, 200),
            (330, 240), (350, 300), (350, 380), (340, 460),
            (370, 530), (430, 570), (510, 550), (570, 490), (590, 410),
            (580, 340), (550, 280), (520, 240), (560, 200), (620, 180), (700, 180),
            (780, 200), (840, 260), (870, 350), (870, 460),
            (840, 550), (780, 620), (680, 660), (550, 680), (400, 680), (280, 660), (180, 650),
        ],
        (100, 650),
        -np.pi / 2,
    ),
    (
        "loop",
        [
            (120, 650), (120, 550), (120, 450), (120, 350), (120, 250),
            (150, 180), (220, 130), (320, 110), (420, 110),
            (500, 130), (560, 180), (590, 260), (590, 360),
            (560, 440), (500, 500), (420, 530),
            (350, 520), (300, 480), (280, 420), (300, 360), (360, 320), (440, 320), (500, 360), (520, 420),
            (560, 480), (620, 540), (700, 580), (780, 580),
            (840, 540), (870, 470), (870, 380), (840, 300), (780, 240), (700, 200),
            (600, 180), (500, 170),
            (420, 200), (360, 260), (340, 340),
            (360, 420), (400, 480), (440, 540), (460, 600),
            (420, 660), (340, 680), (240, 670),
        ],
        (120, 650),
        -np.pi / 2,
    ),
]


class Track:
    """Constant-width corridor with ordered checkpoints.

    Walls connect consecutive outer and consecutive inner boundary
    vertices. Only the end of the corridor is closed; the start stays
    open. Immutable once built.
    """

    def __init__(
        self,
        path: Sequence[Point],
        track_width: float = 55.0,
        start_position: Optional[Point] = None,
        start_angle: Optional[float] = None,
        max_checkpoints: int = 20,
        checkpoint_radius_factor: float = 0.8,
        progress_distance_factor: float = 3.0,
        name: str = "custom",
    ):
        if len(path) < 2:
            raise ValueError(f"Track path needs at least 2 points, got {len(path)}")

        self.name = name
        self.path = np.asarray(path, dtype=np.float64).reshape(-1, 2)
        self.track_width = float(track_width)
        self.progress_distance_factor = float(progress_distance_factor)

        self.walls = self._build_walls()
        self.wall_array = np.array([w.to_array() for w in self.walls], dtype=np.float64)
        self.checkpoints = self._build_checkpoints(max_checkpoints, checkpoint_radius_factor)

        if start_position is None:
            start_position = tuple(self.path[0])
        if start_angle is None:
            dx, dy = self.path[1] - self.path[0]
            start_angle = float(np.arctan2(dy, dx))
        self.start_position = np.asarray(start_position, dtype=np.float64)
        self.start_angle = float(start_angle)

    @classmethod
    def from_path(cls, path: Sequence[Point], track_width: float = 55.0, **kwargs) -> "Track":
        """Track from a user-drawn center path, starting at path[0]."""
        return cls(path, track_width=track_width, **kwargs)

    @classmethod
    def builtin(cls, index: int = 0, track_width: float = 55.0, **kwargs) -> "Track":
        """One of the built-in courses; index wraps around."""
        name, path, start_position, start_angle = COURSES[index % len(COURSES)]
        return cls(
            path,
            track_width=track_width,
            start_position=start_position,
            start_angle=start_angle,
            name=name,
            **kwargs,
        )

    def _build_walls(self) -> List[LineSegment]:
        half_width = self.track_width / 2
        n = len(self.path)
        outer = []
        inner = []

        for i in range(n):
            prev_point = self.path[max(i - 1, 0)]
            next_point = self.path[min(i + 1, n - 1)]
            direction = normalize_vector(next_point - prev_point)
            normal = np.array([-direction[1], direction[0]])

            outer.append(tuple(self.path[i] + normal * half_width))
            inner.append(tuple(self.path[i] - normal * half_width))

        walls = []
        for i in range(n - 1):
            walls.append(LineSegment(outer[i], outer[i + 1]))
            walls.append(LineSegment(inner[i], inner[i + 1]))

        # Closing wall at the end only
        walls.append(LineSegment(outer[-1], inner[-1]))
        return walls

    def _build_checkpoints(self, max_checkpoints: int, radius_factor: float) -> List[Checkpoint]:
        n = len(self.path)
        count = min(max_checkpoints, n)
        return [
            Checkpoint(
                position=tuple(self.path[(i * n) // count]),
                radius=self.track_width * radius_factor,
                reward_value=1.0 / count,
                accumulated_reward=(i + 1) / count,
            )
            for i in range(count)
        ]

    def check_collision(self, position: np.ndarray, radius: float = 5.0) -> bool:
        """True if position lies within radius of any wall."""
        return bool(np.any(point_segment_distances(position, self.wall_array) < radius))

    def get_progress(self, position: np.ndarray, current_checkpoint: int) -> Tuple[float, int]:
        """Course progress of a position given the next checkpoint to reach.

        Inside the next checkpoint's radius the checkpoint is captured and
        progress jumps to its accumulated reward. Otherwise progress is the
        previous checkpoint's reward plus partial credit that decays
        linearly from the full reward_value at distance 0 to nothing at
        progress_distance_factor * radius.

        Args:
            position: Query point, shape (2,)
            current_checkpoint: Index of the next checkpoint to reach

        Returns:
            (progress, new_checkpoint_index)
        """
        if current_checkpoint >= len(self.checkpoints):
            return 1.0, current_checkpoint

        checkpoint = self.checkpoints[current_checkpoint]
        dist = float(np.hypot(
            position[0] - checkpoint.position[0],
            position[1] - checkpoint.position[1],
        ))

        if dist < checkpoint.radius:
            return checkpoint.accumulated_reward, current_checkpoint + 1

        prev_reward = self.checkpoints[current_checkpoint - 1].accumulated_reward if current_checkpoint > 0 else 0.0
        max_dist = checkpoint.radius * self.progress_distance_factor
        partial = max(0.0, 1.0 - dist / max_dist) * checkpoint.reward_value
        return prev_reward + partial, current_checkpoint
