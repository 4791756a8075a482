"""
A birth-death simulator in which every lineage shares the same constant
speciation and extinction rate.
"""
from typing import Tuple

from phylogsa.simulator.BranchingProcessSimulator import (
    BranchingProcessSimulator,
)


class ConstantRateBirthDeathSimulator(BranchingProcessSimulator):
    """Constant-rate birth-death process.

    With a death rate of 0 this is the Yule pure-birth process and every
    simulated tree is ultrametric.

    Example use snippet:
        tree = ConstantRateBirthDeathSimulator(
            birth_rate=1.0, death_rate=0.2, tree_size=10, random_seed=7
        ).simulate_tree()

    Args:
        birth_rate: Speciation rate of every lineage
        death_rate: Extinction rate of every lineage
        **kwargs: Stopping conditions and random source, see
            BranchingProcessSimulator
    """

    def __init__(self, birth_rate: float = 1.0, death_rate: float = 0.0, **kwargs):
        super().__init__(**kwargs)
        self.check_rate("birth_rate", birth_rate)
        self.check_rate("death_rate", death_rate)
        self.birth_rate = birth_rate
        self.death_rate = death_rate

    def initial_rates(self) -> Tuple[float, float]:
        return self.birth_rate, self.death_rate
