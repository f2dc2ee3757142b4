#!/usr/bin/env python3
"""Validate configuration file."""

import argparse
import sys
from pathlib import Path

import yaml

sys.path.insert(0, str(Path(__file__).parent.parent))

from evoracer.models.blocks import Activation


def _check_positive(errors: list, section: dict, name: str, key: str) -> None:
    if key in section and section[key] <= 0:
        errors.append(f"{name}.{key} must be positive, got {section[key]}")


def _check_rate(errors: list, section: dict, name: str, key: str) -> None:
    if key in section and not 0.0 <= section[key] <= 1.0:
        errors.append(f"{name}.{key} must be in [0, 1], got {section[key]}")


def validate_config(config: dict) -> list:
    """Validate configuration.

    Args:
        config: Configuration dictionary

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    # Required sections
    required_sections = ["experiment", "network", "genetic_algorithm", "training"]
    for section in required_sections:
        if section not in config:
            errors.append(f"Missing required section: {section}")

    # Validate experiment
    if "experiment" in config:
        if "seed" not in config["experiment"]:
            errors.append("experiment.seed is required")

    # Validate car
    car = config.get("car", {}) or {}
    for key in ("width", "height", "max_speed", "acceleration", "rotation_speed"):
        _check_positive(errors, car, "car", key)
    _check_rate(errors, car, "car", "friction")

    # Validate sensors
    sensors = config.get("sensors", {}) or {}
    _check_positive(errors, sensors, "sensors", "count")
    _check_positive(errors, sensors, "sensors", "length")

    # Validate network
    if "network" in config:
        network = config["network"] or {}
        topology = network.get("topology", [])
        if len(topology) < 2:
            errors.append(f"network.topology needs at least 2 layers, got {topology}")
        else:
            if any(size <= 0 for size in topology):
                errors.append(f"network.topology sizes must be positive, got {topology}")
            sensor_count = sensors.get("count", 7)
            if topology[0] != sensor_count:
                errors.append(
                    f"network.topology[0] must equal sensors.count ({sensor_count}), got {topology[0]}"
                )
            if topology[-1] != 2:
                errors.append(f"network.topology[-1] must be 2, got {topology[-1]}")

        activation = network.get("activation", "softsign")
        valid = [a.value for a in Activation]
        if activation not in valid:
            errors.append(f"network.activation must be one of {valid}, got '{activation}'")

    # Validate genetic algorithm
    if "genetic_algorithm" in config:
        ga = config["genetic_algorithm"] or {}
        _check_positive(errors, ga, "genetic_algorithm", "population_size")
        _check_positive(errors, ga, "genetic_algorithm", "tournament_size")
        for key in ("crossover_rate", "mutation_rate", "load_mutation_rate"):
            _check_rate(errors, ga, "genetic_algorithm", key)
        for key in ("mutation_amount", "load_mutation_amount"):
            if key in ga and ga[key] < 0:
                errors.append(f"genetic_algorithm.{key} must be non-negative, got {ga[key]}")
        if ga.get("elitism_count", 0) < 0:
            errors.append(f"genetic_algorithm.elitism_count must be non-negative, got {ga['elitism_count']}")

    # Validate simulation
    simulation = config.get("simulation", {}) or {}
    for key in ("time_step", "max_checkpoint_time", "max_generation_time"):
        _check_positive(errors, simulation, "simulation", key)

    # Validate track
    track = config.get("track", {}) or {}
    _check_positive(errors, track, "track", "track_width")
    _check_positive(errors, track, "track", "max_checkpoints")
    if "path" in track and len(track["path"] or []) < 2:
        errors.append("track.path needs at least 2 points")

    # Validate training
    if "training" in config:
        training = config["training"] or {}
        generations = training.get("generations", 0)
        if generations <= 0:
            errors.append(f"training.generations must be positive, got {generations}")
        _check_positive(errors, training, "training", "checkpoint_frequency")
        _check_positive(errors, training, "training", "save_count")

    return errors


def main():
    parser = argparse.ArgumentParser(description="Validate configuration file")
    parser.add_argument(
        "config",
        type=Path,
        help="Path to configuration file",
    )

    args = parser.parse_args()

    if not args.config.exists():
        print(f"Error: Config file not found: {args.config}")
        sys.exit(1)

    with open(args.config) as f:
        config = yaml.safe_load(f) or {}

    errors = validate_config(config)

    if errors:
        print("Configuration validation failed:")
        for error in errors:
            print(f"  - {error}")
        sys.exit(1)
    else:
        print("Configuration is valid")
        sys.exit(0)


if __name__ == "__main__":
    main()
