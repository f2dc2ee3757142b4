# Core type definitions
# FORBIDDEN: torch, logging, any I/O

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple
import numpy as np


@dataclass(frozen=True)
class LineSegment:
    """Immutable 2D segment used for walls and rays."""
    start: Tuple[float, float]
    end: Tuple[float, float]

    @property
    def length(self) -> float:
        return float(np.hypot(self.end[0] - self.start[0], self.end[1] - self.start[1]))

    def to_array(self) -> np.ndarray:
        """Flatten to [x1, y1, x2, y2]."""
        return np.array([*self.start, *self.end], dtype=np.float64)


@dataclass(frozen=True)
class Checkpoint:
    """Track waypoint with a capture radius and cumulative reward.

    accumulated_reward is the progress credited for having reached at
    least this checkpoint; reward_value is the increment over the
    previous checkpoint.
    """
    position: Tuple[float, float]
    radius: float
    reward_value: float
    accumulated_reward: float


@dataclass(frozen=True)
class CarParams:
    """Kinematic constants of a car."""
    width: float = 30.0
    height: float = 15.0
    max_speed: float = 5.0
    acceleration: float = 0.15
    friction: float = 0.98
    rotation_speed: float = 0.05
    reverse_factor: float = 0.3       # max reverse speed = max_speed * reverse_factor
    wall_clearance: float = 2.0       # body corner to wall distance that kills the car


@dataclass(frozen=True)
class SensorParams:
    """Ray sensor array layout."""
    count: int = 7
    length: float = 150.0
    spread: float = np.pi * 0.75      # total fan angle in radians

    def angles(self) -> Tuple[float, ...]:
        """Relative sensor angles, evenly spread and centered on the heading."""
        if self.count == 1:
            return (0.0,)
        step = self.spread / (self.count - 1)
        start = -self.spread / 2
        return tuple(start + step * i for i in range(self.count))


@dataclass(frozen=True)
class EvolutionParams:
    """Genetic algorithm settings used by the simulation."""
    population_size: int = 100
    crossover_rate: float = 0.6
    mutation_rate: float = 0.2
    mutation_amount: float = 0.5
    elitism_count: int = 2
    tournament_size: int = 3
    load_mutation_rate: float = 0.1
    load_mutation_amount: float = 0.2


@dataclass(frozen=True)
class SimulationConfig:
    """Every constant of a training run.

    Times are in milliseconds of simulated time.
    """
    car: CarParams = field(default_factory=CarParams)
    sensors: SensorParams = field(default_factory=SensorParams)
    evolution: EvolutionParams = field(default_factory=EvolutionParams)
    topology: Tuple[int, ...] = (7, 8, 6, 2)
    activation: str = "softsign"
    track_width: float = 55.0
    max_checkpoints: int = 20
    checkpoint_radius_factor: float = 0.8
    progress_distance_factor: float = 3.0
    max_checkpoint_time: float = 5000.0
    time_step: float = 1000.0 / 60.0
    max_generation_time: float = 60000.0
    min_speed_multiplier: int = 1
    max_speed_multiplier: int = 50

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "SimulationConfig":
        """Build from a nested configuration dict (YAML layout).

        Missing sections and keys fall back to defaults; unknown keys
        are ignored.
        """
        def pick(section: str, target) -> Dict[str, Any]:
            values = config.get(section, {}) or {}
            names = target.__dataclass_fields__.keys()
            return {k: v for k, v in values.items() if k in names}

        network = config.get("network", {}) or {}
        simulation = config.get("simulation", {}) or {}
        track = config.get("track", {}) or {}

        kwargs: Dict[str, Any] = {
            "car": CarParams(**pick("car", CarParams)),
            "sensors": SensorParams(**pick("sensors", SensorParams)),
            "evolution": EvolutionParams(**pick("genetic_algorithm", EvolutionParams)),
        }
        if "topology" in network:
            kwargs["topology"] = tuple(int(n) for n in network["topology"])
        if "activation" in network:
            kwargs["activation"] = network["activation"]
        for key in ("track_width", "max_checkpoints", "checkpoint_radius_factor", "progress_distance_factor"):
            if key in track:
                kwargs[key] = track[key]
        for key in (
            "max_checkpoint_time",
            "time_step",
            "max_generation_time",
            "min_speed_multiplier",
            "max_speed_multiplier",
        ):
            if key in simulation:
                kwargs[key] = simulation[key]
        return cls(**kwargs)
