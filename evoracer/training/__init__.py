# Training module - Orchestration
# This module may import from all other evoracer modules

from .genotype import Genotype
from .genetic_algorithm import GAConfig, GeneticAlgorithm
from .engine import SimulationEngine, SimulationState, GenerationSummary
from .trainer import Trainer
