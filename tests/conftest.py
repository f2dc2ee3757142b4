# Pytest configuration and fixtures

import pytest
import numpy as np
import torch
from pathlib import Path
import tempfile
import yaml

from evoracer.core.types import EvolutionParams, SimulationConfig
from evoracer.env import Track


@pytest.fixture
def seed():
    """Fixed seed for reproducibility."""
    return 42


@pytest.fixture
def set_seed(seed):
    """Set all random seeds."""
    np.random.seed(seed)
    torch.manual_seed(seed)


@pytest.fixture
def rng(seed):
    """Seeded numpy generator."""
    return np.random.default_rng(seed)


@pytest.fixture
def straight_path():
    """Straight center path along +x, 50 units between points."""
    return [(100.0 + 50.0 * i, 300.0) for i in range(11)]


@pytest.fixture
def straight_track(straight_path):
    """Corridor around the straight path."""
    return Track.from_path(straight_path)


@pytest.fixture
def walls_box():
    """Closed 200 x 200 box centered on the origin."""
    return np.array([
        [-100, -100, 100, -100],
        [100, -100, 100, 100],
        [100, 100, -100, 100],
        [-100, 100, -100, -100],
    ], dtype=np.float64)


@pytest.fixture
def small_sim_config():
    """Small population and short generations for fast runs."""
    return SimulationConfig(
        evolution=EvolutionParams(population_size=10),
        max_generation_time=2000.0,
    )


@pytest.fixture
def config():
    """Standard test configuration."""
    return {
        "experiment": {
            "name": "test",
            "seed": 42,
        },
        "car": {
            "max_speed": 5.0,
            "friction": 0.98,
        },
        "sensors": {
            "count": 7,
            "length": 150.0,
        },
        "network": {
            "topology": [7, 8, 6, 2],
            "activation": "softsign",
        },
        "genetic_algorithm": {
            "population_size": 8,
            "crossover_rate": 0.6,
            "mutation_rate": 0.2,
            "mutation_amount": 0.5,
            "elitism_count": 2,
            "tournament_size": 3,
        },
        "simulation": {
            "max_checkpoint_time": 5000.0,
            "max_generation_time": 1000.0,
        },
        "track": {
            "index": 0,
            "track_width": 55.0,
        },
        "training": {
            "generations": 3,
            "checkpoint_frequency": 1,
            "save_count": 4,
        },
        "logging": {
            "level": "WARNING",
            "log_frequency": 1,
        },
    }


@pytest.fixture
def temp_dir():
    """Create temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config_file(config, temp_dir):
    """Create temporary config file."""
    config_path = temp_dir / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(config, f)
    return config_path
