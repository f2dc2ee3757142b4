# Genotype: evolvable parameter vector

import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass
class Genotype:
    """Flat network weights plus the scores of its last evaluation.

    evaluation is the raw task score of the current generation; fitness
    is derived from it relative to the population and only used for
    selection.
    """
    parameters: np.ndarray
    evaluation: float = 0.0
    fitness: float = 0.0

    def __post_init__(self):
        self.parameters = np.array(self.parameters, dtype=np.float64).reshape(-1)

    def __len__(self) -> int:
        return len(self.parameters)

    @classmethod
    def random(
        cls,
        parameter_count: int,
        low: float = -1.0,
        high: float = 1.0,
        rng: Optional[np.random.Generator] = None,
    ) -> "Genotype":
        """Genotype with parameters drawn uniformly from [low, high)."""
        rng = rng if rng is not None else np.random.default_rng()
        return cls(rng.uniform(low, high, size=parameter_count))

    @classmethod
    def from_parameters(cls, parameters: Sequence[float]) -> "Genotype":
        return cls(np.array(parameters, dtype=np.float64))

    def parameter_copy(self) -> np.ndarray:
        return self.parameters.copy()

    def clone(self) -> "Genotype":
        """Deep copy, scores included."""
        return Genotype(self.parameters.copy(), self.evaluation, self.fitness)
