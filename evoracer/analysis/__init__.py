# Analysis module - Logging, metrics, genotype checkpoints
# IMPURE - Has side effects (file I/O, logging)

from .logger import setup_logging, MetricsLogger, ExperimentLogger
from .metrics import compute_generation_metrics, compute_run_metrics, check_population_health
from .checkpointing import save_genotypes, load_genotypes, GenotypeCheckpointManager
