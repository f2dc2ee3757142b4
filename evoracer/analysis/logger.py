# Run logging: console/file handlers, per-generation metrics, experiment folders

import csv
import json
import logging
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """Point the "evoracer" logger at the console and, optionally, a file.

    Handlers from an earlier call are closed and replaced, so a second run
    in the same process does not print every line twice. The file always
    receives DEBUG records regardless of level.
    """
    logger = logging.getLogger("evoracer")
    logger.setLevel(level.upper())
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level.upper())
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(console)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


class MetricsLogger:
    """One CSV row per finished generation, plus a JSON summary of the run.

    Columns are taken from the first generation logged. Keys that show up
    later are kept in memory and in the summary but not in the CSV.
    """

    def __init__(self, log_dir: Path):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.csv_path = self.log_dir / "metrics.csv"
        self.json_path = self.log_dir / "metrics.json"

        self.rows: List[Dict[str, Any]] = []
        self._columns: List[str] = []

    def log(self, generation: int, metrics: Dict[str, Any]) -> None:
        row = {"generation": generation, "timestamp": datetime.now().isoformat(), **metrics}
        self.rows.append(row)

        new_file = not self._columns
        if new_file:
            self._columns = list(row)
        with open(self.csv_path, "w" if new_file else "a", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=self._columns, extrasaction="ignore")
            if new_file:
                writer.writeheader()
            writer.writerow(row)

    def get_metric_series(self, metric_name: str) -> List[Any]:
        """Values of one metric in generation order, skipping rows without it."""
        return [row[metric_name] for row in self.rows if metric_name in row]

    def save_summary(self) -> None:
        """Write the full history with the best generation picked out."""
        best = max(self.rows, key=lambda row: row.get("best_fitness", 0.0), default=None)
        summary = {
            "generations": len(self.rows),
            "best_generation": best["generation"] if best else None,
            "best_fitness": best.get("best_fitness") if best else None,
            "history": self.rows,
        }
        with open(self.json_path, "w") as f:
            json.dump(summary, f, indent=2)


def _git(*args: str) -> str:
    return subprocess.check_output(["git", *args], stderr=subprocess.DEVNULL).decode().strip()


class ExperimentLogger:
    """Folder for one training run: experiments/<timestamp>_<name>/.

    Holds logs/ (train.log and the metrics files), checkpoints/ (genotype
    JSON files) and analysis/.
    """

    def __init__(self, experiment_name: str, base_dir: Path = Path("experiments"), level: str = "INFO"):
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.experiment_dir = Path(base_dir) / f"{timestamp}_{experiment_name}"
        self.logs_dir = self.experiment_dir / "logs"
        self.checkpoints_dir = self.experiment_dir / "checkpoints"
        self.analysis_dir = self.experiment_dir / "analysis"
        for directory in (self.logs_dir, self.checkpoints_dir, self.analysis_dir):
            directory.mkdir(parents=True, exist_ok=True)

        self.logger = setup_logging(level=level, log_file=self.logs_dir / "train.log")
        self.metrics = MetricsLogger(self.logs_dir)

    def save_config(self, config: Dict[str, Any]) -> None:
        with open(self.experiment_dir / "config.yaml", "w") as f:
            yaml.dump(config, f, default_flow_style=False)

    def save_git_info(self) -> Optional[Dict[str, Any]]:
        """Record the commit the run was started from.

        Returns None, and writes nothing, outside a git checkout.
        """
        try:
            info = {
                "commit": _git("rev-parse", "HEAD"),
                "branch": _git("rev-parse", "--abbrev-ref", "HEAD"),
                "dirty": subprocess.call(["git", "diff", "--quiet"], stderr=subprocess.DEVNULL) != 0,
            }
        except (subprocess.CalledProcessError, FileNotFoundError):
            self.logger.debug("No git information available")
            return None

        with open(self.experiment_dir / "git_info.json", "w") as f:
            json.dump(info, f, indent=2)
        return info
