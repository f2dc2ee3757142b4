# Core module - Pure functions, no side effects
# FORBIDDEN: torch, logging, pathlib, any I/O

from .types import LineSegment, Checkpoint, CarParams, SensorParams, EvolutionParams, SimulationConfig
from .math_utils import heading_vector, clamp, segment_intersection, ray_segment_distances
from .physics import kinematic_step, body_corners
