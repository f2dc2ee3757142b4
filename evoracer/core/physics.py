# Car kinematics
# FORBIDDEN: torch, logging, any I/O
# Kinematic point model, not rigid-body dynamics

import numpy as np
from typing import Tuple

from .math_utils import heading_vector
from .types import CarParams


def unit_to_signed(value: float) -> float:
    """Remap a [0, 1] network output to [-1, 1]."""
    return value * 2.0 - 1.0


def kinematic_step(
    speed: float,
    angle: float,
    acceleration: float,
    steering: float,
    params: CarParams,
) -> Tuple[float, float, np.ndarray]:
    """Advance speed and heading by one tick.

    Steering is scaled by sign(speed), so a stationary car cannot spin
    in place and a reversing car steers mirrored.

    Args:
        speed: Current speed (units per tick)
        angle: Current heading in radians
        acceleration: Throttle command in [-1, 1]
        steering: Steering command in [-1, 1]
        params: Car constants

    Returns:
        (new_speed, new_angle, displacement)
    """
    speed += acceleration * params.acceleration
    speed = max(-params.max_speed * params.reverse_factor, min(params.max_speed, speed))
    speed *= params.friction

    angle += steering * params.rotation_speed * np.sign(speed)

    displacement = heading_vector(angle) * speed
    return speed, float(angle), displacement


def body_corners(
    position: np.ndarray,
    angle: float,
    width: float,
    height: float,
) -> np.ndarray:
    """World positions of the four corners of a rotated rectangle.

    Args:
        position: Rectangle center, shape (2,)
        angle: Heading in radians (width runs along the heading)
        width: Extent along the heading
        height: Extent across the heading

    Returns:
        Corners, shape (4, 2)
    """
    half_w = width / 2
    half_h = height / 2
    local = np.array([
        [half_w, half_h],
        [half_w, -half_h],
        [-half_w, half_h],
        [-half_w, -half_h],
    ], dtype=np.float64)

    cos_a = np.cos(angle)
    sin_a = np.sin(angle)
    rotation = np.array([[cos_a, -sin_a], [sin_a, cos_a]])
    return local @ rotation.T + np.asarray(position, dtype=np.float64)
