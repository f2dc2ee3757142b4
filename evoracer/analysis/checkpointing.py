# Genotype save/load utilities
# Files hold a plain JSON list of parameter vectors (number[][]), no header

import json
from pathlib import Path
from typing import List, Optional, Sequence
import logging

logger = logging.getLogger(__name__)


def save_genotypes(path: Path, vectors: Sequence[Sequence[float]]) -> None:
    """Write parameter vectors to a JSON file.

    Args:
        path: Checkpoint file path
        vectors: Parameter vectors, best first
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = [[float(x) for x in vector] for vector in vectors]

    # Save to temporary file first, then rename (atomic)
    temp_path = path.with_suffix(".tmp")
    with open(temp_path, "w") as f:
        json.dump(data, f)
    temp_path.replace(path)

    logger.info(f"Saved {len(data)} genotypes to {path}")


def load_genotypes(path: Path) -> List[List[float]]:
    """Read parameter vectors written by save_genotypes.

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if the file is not a list of numeric lists
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Checkpoint not found: {path}")

    with open(path) as f:
        data = json.load(f)

    if not isinstance(data, list) or not all(isinstance(v, list) for v in data):
        raise ValueError(f"Malformed genotype file: {path}")

    vectors = [[float(x) for x in vector] for vector in data]
    logger.info(f"Loaded {len(vectors)} genotypes from {path}")
    return vectors


def _generation_of(p: Path) -> int:
    try:
        return int(p.stem.split("_")[1])
    except (IndexError, ValueError):
        return 0


def get_latest_checkpoint(checkpoint_dir: Path) -> Optional[Path]:
    """Newest generation_<n>.json in a directory, or None."""
    checkpoint_dir = Path(checkpoint_dir)

    if not checkpoint_dir.exists():
        return None

    checkpoints = sorted(checkpoint_dir.glob("generation_*.json"), key=_generation_of, reverse=True)
    return checkpoints[0] if checkpoints else None


def cleanup_old_checkpoints(checkpoint_dir: Path, keep_last: int = 5) -> None:
    """Delete all but the keep_last newest generation checkpoints."""
    checkpoint_dir = Path(checkpoint_dir)

    if not checkpoint_dir.exists():
        return

    checkpoints = sorted(checkpoint_dir.glob("generation_*.json"), key=_generation_of, reverse=True)

    for ckpt in checkpoints[keep_last:]:
        ckpt.unlink()
        logger.debug(f"Deleted old checkpoint: {ckpt}")


class GenotypeCheckpointManager:
    """Keeps recent generation checkpoints plus the best one seen."""

    def __init__(
        self,
        checkpoint_dir: Path,
        keep_last: int = 5,
        save_best: bool = True,
    ):
        self.checkpoint_dir = Path(checkpoint_dir)
        self.checkpoint_dir.mkdir(parents=True, exist_ok=True)
        self.keep_last = keep_last
        self.save_best = save_best
        self.best_metric = float("-inf")

    def save(
        self,
        generation: int,
        vectors: Sequence[Sequence[float]],
        metric_for_best: Optional[float] = None,
    ) -> Path:
        """Save generation_<n>.json, update best.json if metric_for_best improved."""
        path = self.checkpoint_dir / f"generation_{generation}.json"
        save_genotypes(path, vectors)

        if self.save_best and metric_for_best is not None and metric_for_best > self.best_metric:
            self.best_metric = metric_for_best
            save_genotypes(self.checkpoint_dir / "best.json", vectors)
            logger.info(f"New best checkpoint at generation {generation} with fitness {metric_for_best:.4f}")

        cleanup_old_checkpoints(self.checkpoint_dir, self.keep_last)
        return path

    def load_latest(self) -> Optional[List[List[float]]]:
        latest = get_latest_checkpoint(self.checkpoint_dir)
        if latest is None:
            return None
        return load_genotypes(latest)

    def load_best(self) -> Optional[List[List[float]]]:
        best_path = self.checkpoint_dir / "best.json"
        if not best_path.exists():
            return None
        return load_genotypes(best_path)
