"""
A constant-rate birth-death simulator with punctuated, clade-specific rate
changes.
"""
from typing import Dict, List, Sequence, Tuple

import numpy as np

from phylogsa.simulator import simulation_utils
from phylogsa.simulator.BranchingProcessSimulator import (
    BranchingProcessSimulator,
)


class CladeShiftSimulator(BranchingProcessSimulator):
    """Birth-death process with clade shifts.

    Every lineage carries its own speciation and extinction rate, inherited
    by its daughters. The root lineage starts with `birth_rates[0]` and
    `death_rates[0]`. At each later time `rate_times[k]`, one live lineage
    chosen uniformly at random takes the rates `birth_rates[k]` and
    `death_rates[k]`, founding a clade with new rates.

    Args:
        birth_rates: Speciation rates introduced at each shift
        death_rates: Extinction rates introduced at each shift
        rate_times: Times of the shifts, the first must be 0
        **kwargs: Stopping conditions and random source, see
            BranchingProcessSimulator

    Raises:
        InvalidConfigurationError if the schedule is malformed.
    """

    def __init__(
        self,
        birth_rates: Sequence[float],
        death_rates: Sequence[float],
        rate_times: Sequence[float],
        **kwargs,
    ):
        super().__init__(**kwargs)
        simulation_utils.validate_rate_schedule(
            birth_rates, death_rates, rate_times
        )
        self.birth_rates = list(birth_rates)
        self.death_rates = list(death_rates)
        self.rate_times = list(rate_times)
        self.shift = 0

    def reset(self) -> None:
        self.shift = 0

    def initial_rates(self) -> Tuple[float, float]:
        return self.birth_rates[0], self.death_rates[0]

    def next_shift_time(self, time: float) -> float:
        if self.shift + 1 < len(self.rate_times):
            return self.rate_times[self.shift + 1]
        return np.inf

    def apply_shift(self, lineages: List[Dict], time: float) -> None:
        self.shift += 1
        lineage = lineages[self.rng.integers(len(lineages))]
        lineage["birth_rate"] = self.birth_rates[self.shift]
        lineage["death_rate"] = self.death_rates[self.shift]
