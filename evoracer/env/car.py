# Network-driven car agent
# FORBIDDEN: training.*, logging, any I/O

import numpy as np
from typing import List, Sequence

from ..core.types import SimulationConfig
from ..core.math_utils import point_segment_distances
from ..core.physics import body_corners, kinematic_step, unit_to_signed
from ..models.network import DimensionError, NeuralNetwork
from .sensor import Sensor, cast_all


class Car:
    """Phenotype of one genotype for one generation.

    The car refers to its genotype only through genotype_index, a handle
    into the population it was spawned from. Its brain is built once at
    spawn and never changed.
    """

    def __init__(
        self,
        start_position: Sequence[float],
        start_angle: float,
        parameters: Sequence[float],
        genotype_index: int = 0,
        config: SimulationConfig = SimulationConfig(),
    ):
        self.config = config
        self.params = config.car
        self.genotype_index = genotype_index

        self.brain = NeuralNetwork.from_parameters(config.topology, parameters, config.activation)
        self.sensors: List[Sensor] = [
            Sensor(angle, config.sensors.length) for angle in config.sensors.angles()
        ]
        if len(self.sensors) != self.brain.input_count:
            raise DimensionError(
                f"Sensor count {len(self.sensors)} does not match network input size {self.brain.input_count}"
            )
        if self.brain.output_count != 2:
            raise DimensionError(
                f"Network must output (acceleration, steering), got {self.brain.output_count} outputs"
            )

        self.is_best = False
        self.reset(start_position, start_angle)

    def reset(self, position: Sequence[float], angle: float) -> None:
        """Put the car back at a start pose with fresh runtime state."""
        self.position = np.array(position, dtype=np.float64)
        self.angle = float(angle)
        self.speed = 0.0
        self.is_alive = True
        self.current_checkpoint = 0
        self.time_since_checkpoint = 0.0
        self.fitness = 0.0
        self.is_best = False
        for sensor in self.sensors:
            sensor.output = 1.0
            sensor.endpoint = self.position.copy()

    @property
    def sensor_outputs(self) -> np.ndarray:
        return np.array([s.output for s in self.sensors], dtype=np.float64)

    def update(self, dt: float, walls: np.ndarray) -> None:
        """Sense, infer and move for one tick.

        Args:
            dt: Elapsed simulated time (ms)
            walls: Wall segments as [x1, y1, x2, y2], shape (M, 4)
        """
        if not self.is_alive:
            return

        inputs = cast_all(self.sensors, self.position, self.angle, walls)
        outputs = self.brain.process_inputs(inputs)

        acceleration = unit_to_signed(outputs[0])
        steering = unit_to_signed(outputs[1])

        self.speed, self.angle, displacement = kinematic_step(
            self.speed, self.angle, acceleration, steering, self.params
        )
        self.position = self.position + displacement

        self.time_since_checkpoint += dt

    def corners(self) -> np.ndarray:
        return body_corners(self.position, self.angle, self.params.width, self.params.height)

    def check_death(self, walls: np.ndarray) -> bool:
        """Kill the car on wall contact or checkpoint timeout.

        Returns:
            True if the car is dead after the check
        """
        if not self.is_alive:
            return True

        if len(walls) and np.any(point_segment_distances(self.corners(), walls) < self.params.wall_clearance):
            self.die()
            return True

        if self.time_since_checkpoint > self.config.max_checkpoint_time:
            self.die()
            return True

        return False

    def capture_checkpoint(self) -> None:
        self.current_checkpoint += 1
        self.time_since_checkpoint = 0.0

    def die(self) -> None:
        """Freeze the car; fitness keeps its value from here on."""
        self.is_alive = False
