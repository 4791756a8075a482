"""
A birth-death simulator in which speciation rates evolve along the tree.
"""
from typing import Dict, List, Tuple

from phylogsa.simulator.BranchingProcessSimulator import (
    BranchingProcessSimulator,
)


class EvolvingRateSimulator(BranchingProcessSimulator):
    """Lineage-specific, heritable speciation rates.

    Each lineage carries its own speciation rate. At a speciation, each
    daughter receives the parent's rate multiplied by `1 + Z * evolving_std`,
    with `Z` a standard-normal draw, clamped at 0. The extinction rate is
    shared by all lineages.

    Args:
        birth_rate: Speciation rate of the root lineage
        evolving_std: Scale of the multiplicative noise on daughter rates
        death_rate: Extinction rate of every lineage
        **kwargs: Stopping conditions and random source, see
            BranchingProcessSimulator
    """

    def __init__(
        self,
        birth_rate: float = 1.0,
        evolving_std: float = 1.0,
        death_rate: float = 0.0,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.check_rate("birth_rate", birth_rate)
        self.check_rate("evolving_std", evolving_std)
        self.check_rate("death_rate", death_rate)
        self.birth_rate = birth_rate
        self.evolving_std = evolving_std
        self.death_rate = death_rate

    def initial_rates(self) -> Tuple[float, float]:
        return self.birth_rate, self.death_rate

    def daughter_rates(self, lineage: Dict) -> List[Tuple[float, float]]:
        rates = []
        for _ in range(2):
            rate = lineage["birth_rate"] * (
                1 + self.rng.standard_normal() * self.evolving_std
            )
            rates.append((max(0.0, rate), lineage["death_rate"]))
        return rates
