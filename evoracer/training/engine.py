# Simulation engine
# Ties the track, the cars and the genetic algorithm into one training loop

import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import logging

from ..core.types import SimulationConfig
from ..core.math_utils import clamp
from ..env import Car, Track
from ..models.network import DimensionError, NeuralNetwork
from .genetic_algorithm import GAConfig, GeneticAlgorithm


logger = logging.getLogger(__name__)

CUSTOM_TRACK_INDEX = -1


@dataclass
class SimulationState:
    """Snapshot for display, recomputed on every call."""
    generation: int
    best_fitness: float
    average_fitness: float
    alive_count: int
    total_count: int
    is_running: bool
    speed_multiplier: int


@dataclass
class GenerationSummary:
    """Outcome of one finished generation."""
    generation: int
    best_fitness: float
    average_fitness: float
    evaluations: List[float]
    alive_at_end: int
    ticks: int
    elapsed_time: float
    timed_out: bool


class SimulationEngine:
    """Training loop driver.

    Owns one Track and one GeneticAlgorithm and materializes one Car per
    genotype. Car i is spawned from population[i] and keeps that index
    as its handle for the whole generation; the population is only
    replaced between generations.
    """

    def __init__(
        self,
        config: SimulationConfig = SimulationConfig(),
        track_index: int = 0,
        track: Optional[Track] = None,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        if track is None:
            self.current_track_index = track_index
            self.track = self._builtin_track(track_index)
        else:
            self.current_track_index = CUSTOM_TRACK_INDEX
            self.track = track

        self.parameter_count = NeuralNetwork(config.topology, config.activation).weight_count
        evolution = config.evolution
        self.ga = GeneticAlgorithm(
            GAConfig(
                population_size=evolution.population_size,
                parameter_count=self.parameter_count,
                crossover_rate=evolution.crossover_rate,
                mutation_rate=evolution.mutation_rate,
                mutation_amount=evolution.mutation_amount,
                elitism_count=evolution.elitism_count,
                tournament_size=evolution.tournament_size,
            ),
            rng=self.rng,
        )

        self.cars: List[Car] = []
        self.is_running = False
        self.speed_multiplier = 1
        self.generation_time = 0.0
        self.generation_ticks = 0
        self.history: List[GenerationSummary] = []
        self.last_ranked_parameters: List[List[float]] = []

        logger.info(
            f"Engine ready: track '{self.track.name}', population {evolution.population_size}, "
            f"{self.parameter_count} parameters per genotype"
        )
        self.build_cars()

    def _builtin_track(self, index: int) -> Track:
        return Track.builtin(
            index,
            track_width=self.config.track_width,
            max_checkpoints=self.config.max_checkpoints,
            checkpoint_radius_factor=self.config.checkpoint_radius_factor,
            progress_distance_factor=self.config.progress_distance_factor,
        )

    @property
    def generation(self) -> int:
        return self.ga.generation_count

    @property
    def population(self):
        return self.ga.population

    def build_cars(self) -> None:
        """Spawn one car per genotype at the track's start pose."""
        self.cars = [
            Car(self.track.start_position, self.track.start_angle, genotype.parameters, index, self.config)
            for index, genotype in enumerate(self.ga.population)
        ]
        self.generation_time = 0.0
        self.generation_ticks = 0
        self._update_best_car()

    def step(self, dt: Optional[float] = None) -> bool:
        """Advance every alive car by one tick, in population order.

        Args:
            dt: Simulated time step (ms); defaults to config.time_step

        Returns:
            True if this tick finished the generation
        """
        if dt is None:
            dt = self.config.time_step

        walls = self.track.wall_array
        alive_count = 0

        for car in self.cars:
            if not car.is_alive:
                continue

            car.update(dt, walls)

            progress, new_checkpoint = self.track.get_progress(car.position, car.current_checkpoint)
            if new_checkpoint > car.current_checkpoint:
                car.capture_checkpoint()
            car.fitness = progress

            if car.check_death(walls):
                self.ga.population[car.genotype_index].evaluation = car.fitness
            else:
                alive_count += 1

        self._update_best_car()
        self.generation_time += dt
        self.generation_ticks += 1

        timed_out = self.generation_time >= self.config.max_generation_time
        if alive_count == 0 or timed_out:
            self.end_generation(timed_out=timed_out and alive_count > 0)
            return True
        return False

    def end_generation(self, timed_out: bool = False) -> GenerationSummary:
        """Write car fitness back into the genotypes, evolve, and respawn."""
        evaluations = []
        for car in self.cars:
            self.ga.population[car.genotype_index].evaluation = car.fitness
            evaluations.append(car.fitness)

        summary = GenerationSummary(
            generation=self.ga.generation_count,
            best_fitness=max(evaluations) if evaluations else 0.0,
            average_fitness=float(np.mean(evaluations)) if evaluations else 0.0,
            evaluations=evaluations,
            alive_at_end=sum(1 for car in self.cars if car.is_alive),
            ticks=self.generation_ticks,
            elapsed_time=self.generation_time,
            timed_out=timed_out,
        )
        self.history.append(summary)
        self.last_ranked_parameters = self.save_best(len(self.cars))

        logger.info(
            f"Generation {summary.generation} | "
            f"Best: {summary.best_fitness:.4f} | "
            f"Average: {summary.average_fitness:.4f} | "
            f"Alive: {summary.alive_at_end}/{len(self.cars)} | "
            f"Ticks: {summary.ticks}"
            + (" | time budget reached" if timed_out else "")
        )

        self.ga.evolve()
        self.build_cars()
        return summary

    def _update_best_car(self) -> None:
        """Flag the fittest alive car, or the fittest overall when none is alive."""
        best_car = None
        best_fitness = -1.0

        for car in self.cars:
            car.is_best = False
            if car.is_alive and car.fitness > best_fitness:
                best_fitness = car.fitness
                best_car = car

        if best_car is None:
            for car in self.cars:
                if car.fitness > best_fitness:
                    best_fitness = car.fitness
                    best_car = car

        if best_car is not None:
            best_car.is_best = True

    def get_best_car(self) -> Optional[Car]:
        for car in self.cars:
            if car.is_best:
                return car
        return None

    @property
    def global_best_fitness(self) -> float:
        """Best evaluation over all finished generations."""
        return max((s.best_fitness for s in self.history), default=0.0)

    def get_state(self) -> SimulationState:
        alive_count = sum(1 for car in self.cars if car.is_alive)
        fitnesses = [car.fitness for car in self.cars]
        return SimulationState(
            generation=self.ga.generation_count,
            best_fitness=max(fitnesses, default=0.0),
            average_fitness=float(np.mean(fitnesses)) if fitnesses else 0.0,
            alive_count=alive_count,
            total_count=len(self.cars),
            is_running=self.is_running,
            speed_multiplier=self.speed_multiplier,
        )

    def poses(self) -> List[Tuple[np.ndarray, float, bool, bool]]:
        """(position, angle, is_alive, is_best) per car, in population order."""
        return [(car.position.copy(), car.angle, car.is_alive, car.is_best) for car in self.cars]

    # Control surface

    def start(self) -> None:
        self.is_running = True

    def pause(self) -> None:
        self.is_running = False

    def toggle(self) -> None:
        self.is_running = not self.is_running

    def set_speed(self, multiplier: float) -> None:
        """Number of ticks per frame, clamped to the configured range."""
        self.speed_multiplier = int(clamp(
            int(multiplier),
            self.config.min_speed_multiplier,
            self.config.max_speed_multiplier,
        ))

    def run_frame(self) -> int:
        """Run speed_multiplier ticks if running.

        Returns:
            Number of generations finished during the frame
        """
        if not self.is_running:
            return 0
        finished = 0
        for _ in range(self.speed_multiplier):
            if self.step(self.config.time_step):
                finished += 1
        return finished

    def change_track(self, track_index: int) -> None:
        """Switch to a built-in course and restart evolution from scratch."""
        self.current_track_index = track_index
        self.track = self._builtin_track(track_index)
        self.ga.restart()
        self.build_cars()
        logger.info(f"Changed to track '{self.track.name}', population restarted")

    def set_custom_track(self, path: Sequence[Tuple[float, float]]) -> None:
        """Switch to a user-drawn course and restart evolution from scratch."""
        track = Track.from_path(
            path,
            track_width=self.config.track_width,
            max_checkpoints=self.config.max_checkpoints,
            checkpoint_radius_factor=self.config.checkpoint_radius_factor,
            progress_distance_factor=self.config.progress_distance_factor,
        )
        self.current_track_index = CUSTOM_TRACK_INDEX
        self.track = track
        self.ga.restart()
        self.build_cars()
        logger.info(f"Custom track with {len(path)} points, population restarted")

    def reset(self) -> None:
        """Pause and restart evolution on the current track."""
        self.pause()
        self.ga.restart()
        self.build_cars()
        logger.info("Simulation reset")

    # Save / load

    def save_best(self, count: int = 10) -> List[List[float]]:
        """Parameter vectors of the count fittest cars' genotypes, best first.

        A snapshot: later evolution does not change the returned lists.
        """
        ranked = sorted(self.cars, key=lambda car: car.fitness, reverse=True)
        return [
            self.ga.population[car.genotype_index].parameters.tolist()
            for car in ranked[:max(count, 0)]
        ]

    def load(self, vectors: Sequence[Sequence[float]]) -> None:
        """Continue training from saved parameter vectors.

        Every saved vector gets a car. Slots beyond the saved vectors are
        filled with lightly perturbed copies. The generation counter
        restarts at 1.

        Raises:
            ValueError: if vectors is empty
            DimensionError: if a vector does not match the network size
        """
        if len(vectors) == 0:
            raise ValueError("No genotypes to load")
        for i, vector in enumerate(vectors):
            if len(vector) != self.parameter_count:
                logger.warning(f"Rejected genotype {i}: {len(vector)} parameters")
                raise DimensionError(
                    f"Genotype {i} has {len(vector)} parameters, network needs {self.parameter_count}"
                )

        self.ga.seed_population(
            vectors,
            mutation_rate=self.config.evolution.load_mutation_rate,
            mutation_amount=self.config.evolution.load_mutation_amount,
        )
        self.build_cars()
        logger.info(f"Loaded {len(vectors)} genotypes, generation counter reset")
