"""
A birth-death simulator whose rates change for every lineage at once at
scheduled points in time.
"""
from typing import Dict, List, Sequence, Tuple

import numpy as np

from phylogsa.simulator import simulation_utils
from phylogsa.simulator.BranchingProcessSimulator import (
    BranchingProcessSimulator,
)


class TemporalShiftBirthDeathSimulator(BranchingProcessSimulator):
    """Birth-death process with global rate shifts.

    From time `rate_times[k]` on, every lineage speciates at `birth_rates[k]`
    and goes extinct at `death_rates[k]`. Shifts compete with speciation and
    extinction as a third kind of event.

    Args:
        birth_rates: Speciation rates of the successive epochs
        death_rates: Extinction rates of the successive epochs
        rate_times: Start times of the epochs, the first must be 0
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
        self.epoch = 0

    def reset(self) -> None:
        self.epoch = 0

    def initial_rates(self) -> Tuple[float, float]:
        return self.birth_rates[0], self.death_rates[0]

    def lineage_rates(
        self, lineages: List[Dict], time: float
    ) -> Tuple[np.ndarray, np.ndarray]:
        n = len(lineages)
        return (
            np.full(n, self.birth_rates[self.epoch], dtype=float),
            np.full(n, self.death_rates[self.epoch], dtype=float),
        )

    def daughter_rates(self, lineage: Dict) -> List[Tuple[float, float]]:
        return [(self.birth_rates[self.epoch], self.death_rates[self.epoch])] * 2

    def next_shift_time(self, time: float) -> float:
        if self.epoch + 1 < len(self.rate_times):
            return self.rate_times[self.epoch + 1]
        return np.inf

    def apply_shift(self, lineages: List[Dict], time: float) -> None:
        self.epoch += 1
        for lineage in lineages:
            lineage["birth_rate"] = self.birth_rates[self.epoch]
            lineage["death_rate"] = self.death_rates[self.epoch]
