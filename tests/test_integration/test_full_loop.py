# Integration tests for the full evolution loop

import pytest
import numpy as np

from evoracer.analysis.checkpointing import load_genotypes, save_genotypes
from evoracer.core.types import EvolutionParams, SimulationConfig
from evoracer.env import Track
from evoracer.training import SimulationEngine


def run_generations(engine: SimulationEngine, count: int) -> None:
    target = engine.generation + count
    while engine.generation < target:
        engine.step()


class TestFullLoop:
    """End-to-end runs of evaluate, select, breed."""

    def test_single_checkpoint_track(self):
        """Five generations on a one-checkpoint track never lose the best score."""
        config = SimulationConfig(
            evolution=EvolutionParams(population_size=10),
            max_checkpoints=1,
            max_generation_time=1000.0,
        )
        track = Track.from_path([(100.0, 300.0), (400.0, 300.0)], max_checkpoints=1)
        engine = SimulationEngine(config, track=track, seed=42)

        run_generations(engine, 5)

        assert engine.generation == 6
        best = [s.best_fitness for s in engine.history]
        global_best = np.maximum.accumulate(best)
        assert np.all(np.diff(global_best) >= 0)
        assert np.all(np.diff(best) >= 0)
        assert engine.global_best_fitness == 1.0

    def test_straight_track_elitism(self, straight_track):
        """Per-generation best is non-decreasing with elitism."""
        config = SimulationConfig(
            evolution=EvolutionParams(population_size=12),
            max_generation_time=3000.0,
        )
        engine = SimulationEngine(config, track=straight_track, seed=5)

        run_generations(engine, 5)

        best = [s.best_fitness for s in engine.history]
        assert len(best) == 5
        assert all(b2 >= b1 for b1, b2 in zip(best, best[1:]))
        assert all(0.0 <= b <= 1.0 for b in best)

    def test_frame_driven_run(self, small_sim_config, straight_track):
        """Running by frames gives the same result as stepping."""
        stepped = SimulationEngine(small_sim_config, track=straight_track, seed=8)
        run_generations(stepped, 2)

        framed = SimulationEngine(small_sim_config, track=straight_track, seed=8)
        framed.start()
        framed.set_speed(50)
        while framed.generation < 3:
            framed.run_frame()

        assert [s.evaluations for s in framed.history[:2]] == [s.evaluations for s in stepped.history]

    def test_save_load_across_engines(self, small_sim_config, straight_track, temp_dir):
        """Saved genotypes continue training in a fresh engine."""
        engine = SimulationEngine(small_sim_config, track=straight_track, seed=21)
        run_generations(engine, 2)
        path = temp_dir / "best.json"
        save_genotypes(path, engine.last_ranked_parameters[:3])

        fresh = SimulationEngine(small_sim_config, track=straight_track, seed=0)
        fresh.load(load_genotypes(path))
        run_generations(fresh, 1)

        assert fresh.history[0].evaluations[0] == engine.history[-1].best_fitness
        assert fresh.history[0].best_fitness >= engine.history[-1].best_fitness
