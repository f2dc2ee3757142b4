# Genetic algorithm over a population of genotypes

import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import logging

from .genotype import Genotype


logger = logging.getLogger(__name__)


@dataclass
class GAConfig:
    """Genetic algorithm settings."""
    population_size: int = 30
    parameter_count: int = 0
    crossover_rate: float = 0.6     # probability of swapping each gene
    mutation_rate: float = 0.3      # probability of mutating each gene
    mutation_amount: float = 0.5    # max absolute change of a mutated gene
    elitism_count: int = 2          # top genotypes copied unchanged
    tournament_size: int = 3


class GeneticAlgorithm:
    """Generational GA: elitism, tournament selection, uniform crossover,
    per-gene mutation.

    The population is only ever replaced wholesale between generations.
    After calculate_fitness it is sorted best first.
    """

    def __init__(
        self,
        config: GAConfig,
        rng: Optional[np.random.Generator] = None,
    ):
        if config.tournament_size <= 0:
            raise ValueError(f"Tournament size must be positive, got {config.tournament_size}")
        if config.population_size < 0:
            raise ValueError(f"Population size must be non-negative, got {config.population_size}")

        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng()
        self.generation_count = 1
        self.population: List[Genotype] = []
        self._initialize_population()

    def _initialize_population(self) -> None:
        self.population = [
            Genotype.random(self.config.parameter_count, -1.0, 1.0, self.rng)
            for _ in range(self.config.population_size)
        ]

    def calculate_fitness(self) -> None:
        """Set fitness = evaluation / mean evaluation and sort best first.

        When the mean evaluation is not positive every fitness is 0.
        Ties keep their previous relative order.
        """
        if not self.population:
            return

        average = float(np.mean([g.evaluation for g in self.population]))
        for genotype in self.population:
            genotype.fitness = genotype.evaluation / average if average > 0 else 0.0

        self.population.sort(key=lambda g: g.fitness, reverse=True)

    def evolve(self) -> None:
        """Replace the population with the next generation."""
        self.calculate_fitness()

        size = self.config.population_size
        elite = min(self.config.elitism_count, len(self.population), size)
        new_population = [g.clone() for g in self.population[:elite]]

        if len(new_population) < size and not self.population:
            # Nothing to select from: start over with random genotypes
            logger.warning("Empty population, filling next generation randomly")
            while len(new_population) < size:
                new_population.append(Genotype.random(self.config.parameter_count, -1.0, 1.0, self.rng))

        while len(new_population) < size:
            parent1 = self.tournament_select()
            parent2 = self.tournament_select()

            child1, child2 = self.crossover(parent1, parent2)
            self.mutate(child1)
            self.mutate(child2)

            new_population.append(child1)
            if len(new_population) < size:
                new_population.append(child2)

        for genotype in new_population:
            genotype.evaluation = 0.0
            genotype.fitness = 0.0

        self.population = new_population
        self.generation_count += 1

    def tournament_select(self) -> Genotype:
        """Fittest of tournament_size uniform draws, with replacement.

        The earliest drawn candidate wins ties.
        """
        indices = self.rng.integers(0, len(self.population), size=self.config.tournament_size)
        best = self.population[int(indices[0])]
        for idx in indices[1:]:
            candidate = self.population[int(idx)]
            if candidate.fitness > best.fitness:
                best = candidate
        return best

    def crossover(self, parent1: Genotype, parent2: Genotype) -> Tuple[Genotype, Genotype]:
        """Uniform crossover: each gene is swapped with probability crossover_rate."""
        swap = self.rng.random(len(parent1.parameters)) < self.config.crossover_rate
        child1 = Genotype(np.where(swap, parent2.parameters, parent1.parameters))
        child2 = Genotype(np.where(swap, parent1.parameters, parent2.parameters))
        return child1, child2

    def mutate(self, genotype: Genotype) -> None:
        """Add U(-1, 1) * mutation_amount to each gene with probability mutation_rate."""
        self._perturb(genotype.parameters, self.config.mutation_rate, self.config.mutation_amount)

    def _perturb(self, parameters: np.ndarray, rate: float, amount: float) -> None:
        n = len(parameters)
        selected = self.rng.random(n) < rate
        delta = self.rng.uniform(-1.0, 1.0, size=n) * amount
        parameters += np.where(selected, delta, 0.0)

    def get_best(self) -> Optional[Genotype]:
        """population[0]; meaningful once calculate_fitness has sorted it."""
        return self.population[0] if self.population else None

    def restart(self) -> None:
        """Fresh random population at generation 1."""
        self.generation_count = 1
        self._initialize_population()

    def seed_population(
        self,
        vectors: Sequence[Sequence[float]],
        mutation_rate: float = 0.1,
        mutation_amount: float = 0.2,
    ) -> None:
        """Replace the population with saved parameter vectors.

        The remaining slots are filled with copies of randomly chosen
        saved vectors, each gene perturbed by U(-1, 1) * mutation_amount
        with probability mutation_rate. Every saved vector is kept, so a file
        larger than population_size makes the first generation larger; evolve
        brings it back to population_size. The generation counter restarts at 1.
        """
        size = self.config.population_size
        saved = [np.array(v, dtype=np.float64) for v in vectors]

        population = [Genotype.from_parameters(v) for v in saved]
        while len(population) < size:
            source = saved[int(self.rng.integers(0, len(saved)))]
            genotype = Genotype(source.copy())
            self._perturb(genotype.parameters, mutation_rate, mutation_amount)
            population.append(genotype)

        self.population = population
        self.generation_count = 1
