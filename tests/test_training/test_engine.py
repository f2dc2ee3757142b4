# Tests for the simulation engine

import pytest
import numpy as np

from evoracer.core.types import EvolutionParams, SimulationConfig
from evoracer.models import DimensionError
from evoracer.training import SimulationEngine
from evoracer.training.engine import CUSTOM_TRACK_INDEX


def run_generation(engine: SimulationEngine, max_ticks: int = 100000) -> None:
    for _ in range(max_ticks):
        if engine.step():
            return
    raise AssertionError("generation did not finish")


@pytest.fixture
def engine(small_sim_config, straight_track):
    return SimulationEngine(small_sim_config, track=straight_track, seed=7)


class TestEngineSetup:

    def test_one_car_per_genotype(self, engine):
        assert len(engine.cars) == len(engine.population) == 10
        assert [car.genotype_index for car in engine.cars] == list(range(10))

    def test_cars_at_start(self, engine, straight_track):
        for car in engine.cars:
            assert np.array_equal(car.position, straight_track.start_position)
            assert car.angle == straight_track.start_angle

    def test_parameter_count(self, engine):
        assert engine.parameter_count == 132
        assert all(len(g) == 132 for g in engine.population)

    def test_builtin_track(self, small_sim_config):
        engine = SimulationEngine(small_sim_config, track_index=2, seed=1)
        assert engine.track.name == "hairpins"
        assert engine.current_track_index == 2

    def test_initial_state(self, engine):
        state = engine.get_state()
        assert state.generation == 1
        assert state.alive_count == state.total_count == 10
        assert state.best_fitness == 0.0
        assert not state.is_running
        assert state.speed_multiplier == 1


class TestGenerationLifecycle:

    def test_step_moves_alive_cars(self, engine):
        engine.step()
        assert engine.generation_ticks == 1
        assert any(car.speed != 0.0 for car in engine.cars)

    def test_generation_ends(self, engine):
        run_generation(engine)
        assert engine.generation == 2
        assert len(engine.history) == 1
        summary = engine.history[0]
        assert summary.generation == 1
        assert len(summary.evaluations) == 10
        assert summary.best_fitness == max(summary.evaluations)
        assert summary.average_fitness == pytest.approx(np.mean(summary.evaluations))

    def test_time_budget(self, engine, small_sim_config):
        """Generations never run past the time budget."""
        run_generation(engine)
        summary = engine.history[0]
        budget_ticks = int(np.ceil(small_sim_config.max_generation_time / small_sim_config.time_step))
        assert summary.ticks <= budget_ticks + 1
        if summary.alive_at_end:
            assert summary.timed_out

    def test_scores_reset_after_generation(self, engine):
        run_generation(engine)
        assert all(g.evaluation == 0.0 and g.fitness == 0.0 for g in engine.population)
        assert all(car.is_alive and car.fitness == 0.0 for car in engine.cars)

    def test_evaluation_written_on_death(self, engine):
        """A dying car writes its fitness into its own genotype."""
        car = engine.cars[4]
        # First tick captures the checkpoint at the spawn point
        assert not engine.step()
        assert car.current_checkpoint == 1
        car.time_since_checkpoint = 1e9
        assert not engine.step()
        assert not car.is_alive
        assert car.fitness > 0.0
        assert engine.population[4].evaluation == car.fitness
        assert engine.population[5].evaluation == 0.0

    def test_best_car_flag(self, engine):
        for _ in range(30):
            engine.step()
        best = engine.get_best_car()
        assert best is not None
        assert sum(car.is_best for car in engine.cars) == 1
        alive = [car for car in engine.cars if car.is_alive]
        if alive:
            assert best.is_alive
            assert best.fitness == max(car.fitness for car in alive)

    def test_elite_replays_same_fitness(self, engine):
        run_generation(engine)
        first_best = engine.history[0].best_fitness
        run_generation(engine)
        assert engine.history[1].evaluations[0] == first_best
        assert engine.history[1].best_fitness >= first_best

    def test_same_seed_same_run(self, small_sim_config, straight_track):
        runs = []
        for _ in range(2):
            engine = SimulationEngine(small_sim_config, track=straight_track, seed=3)
            run_generation(engine)
            run_generation(engine)
            runs.append([s.evaluations for s in engine.history])
        assert runs[0] == runs[1]

    def test_poses(self, engine):
        poses = engine.poses()
        assert len(poses) == 10
        position, angle, is_alive, is_best = poses[0]
        assert position.shape == (2,)
        assert is_alive


class TestControls:

    def test_run_frame_paused(self, engine):
        assert engine.run_frame() == 0
        assert engine.generation_ticks == 0

    def test_run_frame_speed(self, engine):
        engine.start()
        engine.set_speed(5)
        engine.run_frame()
        assert engine.generation_ticks == 5

    def test_toggle(self, engine):
        engine.toggle()
        assert engine.is_running
        engine.toggle()
        assert not engine.is_running

    def test_speed_clamped(self, engine):
        engine.set_speed(0)
        assert engine.speed_multiplier == 1
        engine.set_speed(500)
        assert engine.speed_multiplier == 50
        engine.set_speed(7.9)
        assert engine.speed_multiplier == 7

    def test_change_track_restarts(self, engine):
        run_generation(engine)
        engine.change_track(1)
        assert engine.generation == 1
        assert engine.track.name == "s_curve"
        assert engine.current_track_index == 1
        assert all(np.array_equal(car.position, engine.track.start_position) for car in engine.cars)

    def test_custom_track(self, engine):
        engine.set_custom_track([(0, 0), (200, 0), (400, 100)])
        assert engine.current_track_index == CUSTOM_TRACK_INDEX
        assert engine.generation == 1
        assert len(engine.track.checkpoints) == 3

    def test_reset(self, engine):
        engine.start()
        run_generation(engine)
        engine.reset()
        assert not engine.is_running
        assert engine.generation == 1
        assert engine.generation_ticks == 0


class TestSaveLoad:

    def test_save_best_order(self, engine):
        for _ in range(40):
            engine.step()
        saved = engine.save_best(3)
        assert len(saved) == 3
        ranked = sorted(engine.cars, key=lambda car: car.fitness, reverse=True)
        assert saved[0] == engine.population[ranked[0].genotype_index].parameters.tolist()

    def test_save_best_is_snapshot(self, engine):
        saved = engine.save_best(1)
        engine.population[0].parameters[:] = 0.0
        engine.population[1].parameters[:] = 0.0
        assert any(v != 0.0 for v in saved[0])

    def test_load_reproduces_fitness(self, small_sim_config, straight_track):
        """A saved genotype scores the same after loading."""
        source = SimulationEngine(small_sim_config, track=straight_track, seed=11)
        run_generation(source)
        best = source.last_ranked_parameters[0]

        target = SimulationEngine(small_sim_config, track=straight_track, seed=99)
        target.load([best])
        assert target.population[0].parameters.tolist() == best
        run_generation(target)
        assert target.history[0].evaluations[0] == source.history[0].best_fitness

    def test_load_resets_generation(self, engine):
        run_generation(engine)
        engine.load(engine.save_best(2))
        assert engine.generation == 1
        assert len(engine.population) == 10

    def test_load_empty(self, engine):
        with pytest.raises(ValueError):
            engine.load([])

    def test_load_wrong_length(self, engine):
        with pytest.raises(DimensionError):
            engine.load([[0.0] * 10])

    def test_load_keeps_every_vector(self, engine):
        vectors = [[float(i)] * 132 for i in range(15)]
        engine.load(vectors)
        assert len(engine.population) == 15
        assert len(engine.cars) == 15
        assert engine.population[14].parameters[0] == 14.0

        run_generation(engine)
        assert len(engine.history[0].evaluations) == 15
        assert len(engine.population) == 10
