#!/usr/bin/env python3
"""Observe car behavior without evolving anything.

Replays a saved genotype file (or a random population) on a track for a
fixed number of ticks and prints how far each car got. Useful for
checking what a checkpoint has actually learned.

Usage:
    # Random population (baseline behavior)
    python scripts/observe.py --config configs/base.yaml --count 10

    # Saved genotypes
    python scripts/observe.py --genotypes experiments/.../checkpoints/best.json --track 1

    # Save per-tick poses to file
    python scripts/observe.py --genotypes best.json --output poses.csv
"""

import argparse
import csv
import sys
from pathlib import Path

import numpy as np
import yaml

sys.path.insert(0, str(Path(__file__).parent.parent))

from evoracer.core.types import SimulationConfig
from evoracer.env import Car, Track
from evoracer.models import NeuralNetwork
from evoracer.training.genotype import Genotype
from evoracer.analysis.checkpointing import load_genotypes


def load_config(config_path: Path) -> dict:
    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def run_replay(
    cars: list,
    track: Track,
    config: SimulationConfig,
    max_ticks: int,
    writer=None,
    verbose: bool = False,
) -> int:
    """Step every car until all are dead or max_ticks is reached.

    Returns:
        Number of ticks run
    """
    walls = track.wall_array

    for tick in range(max_ticks):
        alive = 0
        for index, car in enumerate(cars):
            if not car.is_alive:
                continue

            car.update(config.time_step, walls)
            progress, new_checkpoint = track.get_progress(car.position, car.current_checkpoint)
            if new_checkpoint > car.current_checkpoint:
                car.capture_checkpoint()
            car.fitness = progress

            if not car.check_death(walls):
                alive += 1

            if writer is not None:
                writer.writerow([tick, index, car.position[0], car.position[1], car.angle, car.speed, car.fitness])

        if verbose and tick % 200 == 0:
            best = max(car.fitness for car in cars)
            print(f"  Tick {tick:5d}: alive={alive}, best progress={best:.3f}")

        if alive == 0:
            return tick + 1

    return max_ticks


def main():
    parser = argparse.ArgumentParser(description="Replay genotypes on a track")
    parser.add_argument("--config", type=Path, default=Path("configs/base.yaml"))
    parser.add_argument("--genotypes", type=Path, default=None, help="Saved genotype file")
    parser.add_argument("--count", type=int, default=10, help="Random cars when no file is given")
    parser.add_argument("--track", type=int, default=None, help="Built-in track index")
    parser.add_argument("--ticks", type=int, default=None, help="Tick limit (default: generation budget)")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--output", type=Path, default=None, help="CSV file for per-tick poses")
    parser.add_argument("--verbose", action="store_true")

    args = parser.parse_args()

    raw_config = load_config(args.config) if args.config.exists() else {}
    config = SimulationConfig.from_dict(raw_config)

    track_index = args.track
    if track_index is None:
        track_index = (raw_config.get("track", {}) or {}).get("index", 0)
    track = Track.builtin(
        track_index,
        track_width=config.track_width,
        max_checkpoints=config.max_checkpoints,
        checkpoint_radius_factor=config.checkpoint_radius_factor,
        progress_distance_factor=config.progress_distance_factor,
    )

    if args.genotypes is not None:
        vectors = load_genotypes(args.genotypes)
        source = str(args.genotypes)
    else:
        seed = args.seed if args.seed is not None else (raw_config.get("experiment", {}) or {}).get("seed", 42)
        rng = np.random.default_rng(seed)
        parameter_count = NeuralNetwork(config.topology, config.activation).weight_count
        vectors = [Genotype.random(parameter_count, rng=rng).parameters for _ in range(args.count)]
        source = f"{args.count} random genotypes"

    cars = [
        Car(track.start_position, track.start_angle, vector, index, config)
        for index, vector in enumerate(vectors)
    ]

    max_ticks = args.ticks
    if max_ticks is None:
        max_ticks = int(np.ceil(config.max_generation_time / config.time_step))

    print(f"Replaying {source} on track '{track.name}' for up to {max_ticks} ticks")

    if args.output is not None:
        with open(args.output, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["tick", "car", "x", "y", "angle", "speed", "progress"])
            ticks = run_replay(cars, track, config, max_ticks, writer, args.verbose)
        print(f"Poses written to {args.output}")
    else:
        ticks = run_replay(cars, track, config, max_ticks, verbose=args.verbose)

    print(f"\nFinished after {ticks} ticks")
    print(f"{'car':>4}  {'progress':>8}  {'checkpoint':>10}  {'alive':>5}")
    for index, car in enumerate(cars):
        print(f"{index:>4}  {car.fitness:>8.3f}  {car.current_checkpoint:>10d}  {str(car.is_alive):>5}")


if __name__ == "__main__":
    main()
