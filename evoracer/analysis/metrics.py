# Metrics computation

import numpy as np
from typing import Dict, List, Sequence

from ..core.math_utils import moving_average


def compute_generation_metrics(evaluations: Sequence[float]) -> Dict[str, float]:
    """Summary statistics of one generation's evaluations.

    Args:
        evaluations: Raw per-genotype evaluations

    Returns:
        Dict of computed metrics (empty for an empty generation)
    """
    metrics = {}

    if len(evaluations):
        values = np.asarray(evaluations, dtype=np.float64)
        metrics["best_fitness"] = float(np.max(values))
        metrics["mean_fitness"] = float(np.mean(values))
        metrics["median_fitness"] = float(np.median(values))
        metrics["std_fitness"] = float(np.std(values))
        metrics["min_fitness"] = float(np.min(values))
        metrics["completion_rate"] = float(np.mean(values >= 1.0))

    return metrics


def compute_run_metrics(best_per_generation: Sequence[float], window: int = 10) -> Dict[str, float]:
    """Progress metrics over a whole run.

    Args:
        best_per_generation: Best evaluation of each finished generation
        window: Smoothing window for the trend

    Returns:
        Dict of run metrics (empty before the first generation)
    """
    metrics = {}

    if len(best_per_generation):
        values = np.asarray(best_per_generation, dtype=np.float64)
        smoothed = moving_average(values, window)
        metrics["global_best_fitness"] = float(np.max(values))
        metrics["best_fitness_trend"] = float(smoothed[-1])
        metrics["improvement"] = float(values[-1] - values[0])
        metrics["generations_since_improvement"] = int(len(values) - 1 - int(np.argmax(values)))

    return metrics


def check_population_health(metrics: Dict[str, float], stagnation_limit: int = 25) -> List[str]:
    """Check for signs that evolution has stalled.

    Args:
        metrics: Merged generation and run metrics
        stagnation_limit: Generations without improvement before warning

    Returns:
        List of warnings (empty if healthy)
    """
    warnings = []

    # Nobody left the start
    best = metrics.get("best_fitness", 1.0)
    if best <= 0.0:
        warnings.append("ZERO FITNESS: no car made any progress")

    # Diversity collapse
    std = metrics.get("std_fitness", 1.0)
    mean = metrics.get("mean_fitness", 0.0)
    if mean > 0 and std / mean < 0.01:
        warnings.append(f"LOW DIVERSITY: fitness std {std:.4f} around mean {mean:.4f}")

    # Stagnation
    stalled = metrics.get("generations_since_improvement", 0)
    if stalled >= stagnation_limit:
        warnings.append(f"STAGNATION: no improvement for {stalled} generations")

    return warnings
