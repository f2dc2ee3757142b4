# Mathematical utilities
# FORBIDDEN: torch, logging, any I/O

import numpy as np
from typing import Optional, Tuple

# Below this |denominator| two segments are treated as parallel
PARALLEL_EPS = 1e-4


def heading_vector(angle: float) -> np.ndarray:
    """Unit vector pointing along angle."""
    return np.array([np.cos(angle), np.sin(angle)], dtype=np.float64)


def normalize_vector(v: np.ndarray) -> np.ndarray:
    """Scale to unit length; the zero vector stays zero."""
    length = float(np.hypot(v[0], v[1]))
    if length == 0:
        return np.zeros(2, dtype=np.float64)
    return np.asarray(v, dtype=np.float64) / length


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value to range.

    Args:
        value: Value to clamp
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Clamped value
    """
    return max(min_val, min(max_val, value))


def segment_intersection(
    p1: Tuple[float, float],
    p2: Tuple[float, float],
    p3: Tuple[float, float],
    p4: Tuple[float, float],
) -> Optional[Tuple[float, float]]:
    """Intersect segment p1-p2 with segment p3-p4.

    Uses the parametric form with t along the first segment and u along
    the second; both must lie in [0, 1].

    Returns:
        Intersection point, or None if the segments miss or are parallel
    """
    x1, y1 = p1
    x2, y2 = p2
    x3, y3 = p3
    x4, y4 = p4

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) < PARALLEL_EPS:
        return None

    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    u = -((x1 - x2) * (y1 - y3) - (y1 - y2) * (x1 - x3)) / denom

    if 0 <= t <= 1 and 0 <= u <= 1:
        return (x1 + t * (x2 - x1), y1 + t * (y2 - y1))
    return None


def ray_segment_distances(
    origin: np.ndarray,
    ends: np.ndarray,
    walls: np.ndarray,
) -> np.ndarray:
    """Vectorized segment_intersection of rays sharing one origin against many walls.

    Args:
        origin: Ray start, shape (2,)
        ends: Ray end(s), shape (2,) or (K, 2)
        walls: Wall segments as [x1, y1, x2, y2], shape (M, 4)

    Returns:
        Distance from origin to each hit, inf where the wall is missed;
        shape (M,) for a single ray, (K, M) for K rays
    """
    ends = np.asarray(ends, dtype=np.float64)
    single = ends.ndim == 1
    ends = np.atleast_2d(ends)
    walls = np.asarray(walls, dtype=np.float64).reshape(-1, 4)

    x1, y1 = float(origin[0]), float(origin[1])
    x2, y2 = ends[:, 0:1], ends[:, 1:2]
    x3, y3, x4, y4 = walls[:, 0], walls[:, 1], walls[:, 2], walls[:, 3]

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    parallel = np.abs(denom) < PARALLEL_EPS
    safe = np.where(parallel, 1.0, denom)

    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / safe
    u = -((x1 - x2) * (y1 - y3) - (y1 - y2) * (x1 - x3)) / safe

    hit = ~parallel & (t >= 0) & (t <= 1) & (u >= 0) & (u <= 1)
    ray_lengths = np.hypot(x2 - x1, y2 - y1)
    distances = np.where(hit, t * ray_lengths, np.inf)
    return distances[0] if single else distances


def point_segment_distances(points: np.ndarray, walls: np.ndarray) -> np.ndarray:
    """Distance from points to segments (projection clamped to each segment).

    Args:
        points: Query point(s), shape (2,) or (P, 2)
        walls: Segments as [x1, y1, x2, y2], shape (M, 4)

    Returns:
        Distances, shape (M,) for a single point, (P, M) otherwise
    """
    points = np.asarray(points, dtype=np.float64)
    single = points.ndim == 1
    points = np.atleast_2d(points)
    walls = np.asarray(walls, dtype=np.float64).reshape(-1, 4)

    start = walls[None, :, 0:2]
    seg = walls[None, :, 2:4] - start
    rel = points[:, None, :] - start

    length_sq = np.sum(seg * seg, axis=-1)
    degenerate = length_sq == 0
    t = np.sum(rel * seg, axis=-1) / np.where(degenerate, 1.0, length_sq)
    t = np.where(degenerate, 0.0, np.clip(t, 0.0, 1.0))

    offset = rel - seg * t[..., None]
    distances = np.hypot(offset[..., 0], offset[..., 1])
    return distances[0] if single else distances


def moving_average(values: np.ndarray, window: int) -> np.ndarray:
    """Compute moving average.

    Args:
        values: Input array
        window: Window size

    Returns:
        Moving average array (same length, padded at start)
    """
    values = np.asarray(values, dtype=np.float64)
    if len(values) < window:
        return values

    cumsum = np.cumsum(values)
    cumsum[window:] = cumsum[window:] - cumsum[:-window]

    result = np.zeros_like(values)
    result[:window] = cumsum[:window] / np.arange(1, window + 1)
    result[window:] = cumsum[window:] / window

    return result
