"""
A birth-death simulator whose speciation rate declines with the number of
live lineages, after Etienne et al. (2012), "Diversity-dependence brings
molecular phylogenies closer to agreement with the fossil record".
"""
from typing import Dict, List, Tuple

import numpy as np

from phylogsa.mixins import InvalidConfigurationError
from phylogsa.simulator.BranchingProcessSimulator import (
    BranchingProcessSimulator,
)


class DiversityDependentSimulator(BranchingProcessSimulator):
    """Diversity-dependent speciation.

    The per-lineage speciation rate is
    `max(0, max_birth_rate * (1 - n / carrying_capacity))`, recomputed at every
    step from the current number `n` of live lineages. The extinction rate is
    constant.

    Args:
        carrying_capacity: The (modified) carrying capacity K'
        max_birth_rate: Speciation rate of a lineage alone in the tree
        death_rate: Extinction rate of every lineage
        **kwargs: Stopping conditions and random source, see
            BranchingProcessSimulator

    Raises:
        InvalidConfigurationError if the carrying capacity is not positive.
    """

    def __init__(
        self,
        carrying_capacity: float,
        max_birth_rate: float = 1.0,
        death_rate: float = 0.0,
        **kwargs,
    ):
        super().__init__(**kwargs)
        if carrying_capacity is None or carrying_capacity <= 0:
            raise InvalidConfigurationError(
                "Please specify a positive carrying_capacity"
            )
        self.check_rate("max_birth_rate", max_birth_rate)
        self.check_rate("death_rate", death_rate)
        self.carrying_capacity = carrying_capacity
        self.max_birth_rate = max_birth_rate
        self.death_rate = death_rate

    def speciation_rate(self, n_lineages: int) -> float:
        """Per-lineage speciation rate with `n_lineages` live lineages."""
        return max(
            0.0,
            self.max_birth_rate * (1 - n_lineages / self.carrying_capacity),
        )

    def initial_rates(self) -> Tuple[float, float]:
        return self.speciation_rate(1), self.death_rate

    def lineage_rates(
        self, lineages: List[Dict], time: float
    ) -> Tuple[np.ndarray, np.ndarray]:
        n = len(lineages)
        return (
            np.full(n, self.speciation_rate(n)),
            np.full(n, self.death_rate),
        )
