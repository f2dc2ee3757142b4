# Main trainer class

import math
import time
from pathlib import Path
from typing import Any, Dict, Optional
import logging

from ..core.types import SimulationConfig
from ..env import Track
from ..analysis.checkpointing import GenotypeCheckpointManager, load_genotypes, save_genotypes
from ..analysis.logger import MetricsLogger
from ..analysis.metrics import check_population_health, compute_generation_metrics, compute_run_metrics
from .engine import SimulationEngine


logger = logging.getLogger(__name__)


class Trainer:
    """Headless training orchestrator.

    Drives a SimulationEngine with fixed time steps, one generation at a
    time, and reports per-generation metrics.
    """

    def __init__(self, config: Dict[str, Any]):
        """Initialize trainer.

        Args:
            config: Configuration dictionary (YAML layout)
        """
        self.config = config
        self.sim_config = SimulationConfig.from_dict(config)

        seed = config.get("experiment", {}).get("seed", 42)
        track_config = config.get("track", {}) or {}
        custom_path = track_config.get("path")

        if custom_path:
            track = Track.from_path(
                [tuple(p) for p in custom_path],
                track_width=self.sim_config.track_width,
                max_checkpoints=self.sim_config.max_checkpoints,
                checkpoint_radius_factor=self.sim_config.checkpoint_radius_factor,
                progress_distance_factor=self.sim_config.progress_distance_factor,
            )
            self.engine = SimulationEngine(self.sim_config, track=track, seed=seed)
        else:
            self.engine = SimulationEngine(
                self.sim_config,
                track_index=track_config.get("index", 0),
                seed=seed,
            )

        training_config = config.get("training", {}) or {}
        self.log_frequency = config.get("logging", {}).get("log_frequency", 1)
        self.checkpoint_frequency = training_config.get("checkpoint_frequency", 10)
        self.save_count = training_config.get("save_count", 10)

        self.metrics_history = []

    @property
    def generation(self) -> int:
        return self.engine.generation

    def run_generation(self) -> Dict[str, float]:
        """Step until the current generation ends.

        The engine's time budget ends every generation; the tick cap only
        guards against a misconfigured budget.
        """
        time_step = self.sim_config.time_step
        max_ticks = math.ceil(self.sim_config.max_generation_time / time_step) + 1

        finished = False
        for _ in range(max_ticks):
            if self.engine.step(time_step):
                finished = True
                break
        if not finished:
            logger.warning(f"Generation {self.generation} hit the tick cap of {max_ticks}, ending it")
            self.engine.end_generation(timed_out=True)

        summary = self.engine.history[-1]
        metrics = {
            **compute_generation_metrics(summary.evaluations),
            **compute_run_metrics([s.best_fitness for s in self.engine.history]),
            "ticks": summary.ticks,
            "timed_out": summary.timed_out,
        }
        return metrics

    def train(
        self,
        num_generations: Optional[int] = None,
        metrics_logger: Optional[MetricsLogger] = None,
        checkpoints: Optional[GenotypeCheckpointManager] = None,
    ) -> Dict[str, float]:
        """Run training loop.

        Args:
            num_generations: Generations to run (overrides config)
            metrics_logger: Optional per-generation metrics sink
            checkpoints: Optional checkpoint manager, saved every
                checkpoint_frequency generations

        Returns:
            Final metrics
        """
        if num_generations is None:
            num_generations = self.config.get("training", {}).get("generations", 50)

        logger.info(f"Starting training for {num_generations} generations")
        start_time = time.time()
        metrics: Dict[str, float] = {}

        for _ in range(num_generations):
            generation = self.generation
            metrics = self.run_generation()
            self.metrics_history.append(metrics)

            if metrics_logger is not None:
                metrics_logger.log(generation, metrics)

            if generation % self.log_frequency == 0:
                elapsed = time.time() - start_time
                logger.info(
                    f"Generation {generation} | "
                    f"Best: {metrics.get('best_fitness', 0.0):.4f} | "
                    f"Mean: {metrics.get('mean_fitness', 0.0):.4f} | "
                    f"Global best: {metrics.get('global_best_fitness', 0.0):.4f} | "
                    f"Elapsed: {elapsed:.1f}s"
                )

            for warning in check_population_health(metrics):
                logger.warning(warning)

            if checkpoints is not None and generation % self.checkpoint_frequency == 0:
                checkpoints.save(
                    generation,
                    self.engine.last_ranked_parameters[:self.save_count],
                    metric_for_best=metrics.get("best_fitness"),
                )

        logger.info(f"Training complete. Total time: {time.time() - start_time:.1f}s")
        return metrics

    def save(self, path: Path) -> None:
        """Save the top genotypes of the last finished generation.

        Before any generation has finished, the live cars are ranked instead.
        """
        vectors = self.engine.last_ranked_parameters[:self.save_count]
        if not vectors:
            vectors = self.engine.save_best(self.save_count)
        save_genotypes(path, vectors)

    def load(self, path: Path) -> None:
        """Continue training from a genotype file."""
        self.engine.load(load_genotypes(path))
        logger.info(f"Resumed from {path}")
