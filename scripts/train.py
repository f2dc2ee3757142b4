#!/usr/bin/env python3
"""Training entry point for evoracer."""

import argparse
import logging
import random
import sys
from pathlib import Path

import numpy as np
import torch
import yaml

# Add repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from evoracer.training.trainer import Trainer
from evoracer.analysis.checkpointing import GenotypeCheckpointManager
from evoracer.analysis.logger import ExperimentLogger


def set_global_seed(seed: int) -> int:
    """Set all random seeds for reproducibility.

    The engine draws from its own numpy Generator seeded from the config;
    the global seeds cover everything else.

    Args:
        seed: Random seed

    Returns:
        The seed used
    """
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    return seed


def load_config(config_path: Path) -> dict:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file

    Returns:
        Configuration dictionary
    """
    with open(config_path) as f:
        config = yaml.safe_load(f)
    return config or {}


def apply_overrides(config: dict, overrides: list) -> dict:
    """Apply command-line overrides to config.

    Args:
        config: Base configuration
        overrides: List of "key.subkey=value" strings

    Returns:
        Modified configuration
    """
    for override in overrides:
        if "=" not in override:
            raise ValueError(f"Invalid override format: {override}. Expected key=value")

        key, value = override.split("=", 1)
        keys = key.split(".")

        # Navigate to nested key
        d = config
        for k in keys[:-1]:
            if k not in d or d[k] is None:
                d[k] = {}
            d = d[k]

        # Infer type and set value
        try:
            d[keys[-1]] = int(value)
        except ValueError:
            try:
                d[keys[-1]] = float(value)
            except ValueError:
                if value.lower() in ("true", "false"):
                    d[keys[-1]] = value.lower() == "true"
                else:
                    d[keys[-1]] = value

    return config


def main():
    parser = argparse.ArgumentParser(description="Evolve car-driving networks")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/base.yaml"),
        help="Path to configuration file",
    )
    parser.add_argument(
        "--generations",
        type=int,
        default=None,
        help="Number of generations (overrides config)",
    )
    parser.add_argument(
        "--track",
        type=int,
        default=None,
        help="Built-in track index (overrides config)",
    )
    parser.add_argument(
        "--override",
        action="append",
        default=[],
        help="Config overrides in format key.subkey=value",
    )
    parser.add_argument(
        "--resume",
        type=Path,
        default=None,
        help="Genotype file to continue training from",
    )
    parser.add_argument(
        "--experiment-name",
        type=str,
        default=None,
        help="Experiment name (overrides config)",
    )

    args = parser.parse_args()

    config = load_config(args.config)

    if args.override:
        config = apply_overrides(config, args.override)

    if args.generations:
        config.setdefault("training", {})["generations"] = args.generations

    if args.track is not None:
        config.setdefault("track", {})["index"] = args.track

    if args.experiment_name:
        config.setdefault("experiment", {})["name"] = args.experiment_name

    seed = config.get("experiment", {}).get("seed", 42)
    set_global_seed(seed)

    experiment_name = config.get("experiment", {}).get("name", "default")
    exp_logger = ExperimentLogger(
        experiment_name,
        level=config.get("logging", {}).get("level", "INFO"),
    )
    exp_logger.save_config(config)
    exp_logger.save_git_info()

    logger = logging.getLogger("evoracer")
    logger.info(f"Starting experiment: {experiment_name}")
    logger.info(f"Seed: {seed}")

    trainer = Trainer(config)

    if args.resume:
        trainer.load(args.resume)

    checkpoints = GenotypeCheckpointManager(
        exp_logger.checkpoints_dir,
        keep_last=config.get("training", {}).get("keep_last", 5),
    )

    try:
        final_metrics = trainer.train(metrics_logger=exp_logger.metrics, checkpoints=checkpoints)
        logger.info(f"Training complete. Final metrics: {final_metrics}")
    except KeyboardInterrupt:
        logger.info("Training interrupted by user")
    finally:
        trainer.save(exp_logger.checkpoints_dir / "final.json")
        exp_logger.metrics.save_summary()

    logger.info("Done")


if __name__ == "__main__":
    main()
