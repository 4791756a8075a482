"""
A birth-death simulator in which a speciating lineage splits its speciation
rate between its daughters, as in the beta-splitting model of Blum and
Francois.
"""
from typing import Dict, List, Tuple

from phylogsa.mixins import InvalidConfigurationError
from phylogsa.simulator.BranchingProcessSimulator import (
    BranchingProcessSimulator,
)


class BetaSplitSimulator(BranchingProcessSimulator):
    """Beta-split speciation rates.

    At a speciation the parent's rate is divided between the two daughters
    as `p * rate` and `(1 - p) * rate`, with `p ~ Beta(a + 1, a + 1)` and `a`
    the model parameter. Daughters keep the parent's extinction rate.

    Args:
        birth_rate: Speciation rate of the root lineage
        model_param: The parameter `a`, must be greater than -1
        death_rate: Extinction rate of every lineage
        **kwargs: Stopping conditions and random source, see
            BranchingProcessSimulator
    """

    def __init__(
        self,
        birth_rate: float = 1.0,
        model_param: float = 0.0,
        death_rate: float = 0.0,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.check_rate("birth_rate", birth_rate)
        self.check_rate("death_rate", death_rate)
        if model_param <= -1:
            raise InvalidConfigurationError(
                "Please specify a model_param greater than -1"
            )
        self.birth_rate = birth_rate
        self.model_param = model_param
        self.death_rate = death_rate

    def initial_rates(self) -> Tuple[float, float]:
        return self.birth_rate, self.death_rate

    def daughter_rates(self, lineage: Dict) -> List[Tuple[float, float]]:
        p = self.rng.beta(self.model_param + 1, self.model_param + 1)
        rate = lineage["birth_rate"]
        return [
            (p * rate, lineage["death_rate"]),
            ((1 - p) * rate, lineage["death_rate"]),
        ]
