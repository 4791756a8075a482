"""
GSA sampler for birth-death models.
"""
from typing import Tuple

import numpy as np

from phylogsa.data import PhyloTree
from phylogsa.sampler import sampler_utilities
from phylogsa.sampler.GSASampler import DurationSampler
from phylogsa.tools import tree_utilities


class BirthDeathSampler(DurationSampler):
    """Samples trees from any birth-death model for which `nstar` exists.

    Trajectories are simulated up to `nstar` species, a size from which the
    chance of going back down to the target size is negligible. Every
    interval during which a trajectory had exactly `tree_size` species is
    used, and snapshots are spread over them in proportion to their length.
    Trajectories that never had `tree_size` species for a positive time are
    discarded.

    Args:
        rate: Expected number of samples per unit of time at the target size
        nstar: Size to simulate to
        **kwargs: See DurationSampler
    """

    def __init__(self, rate: float, nstar: int, **kwargs):
        super().__init__(rate, **kwargs)
        self.nstar = nstar

    def simulation_size(self, tree_size: int) -> int:
        return self.nstar

    def weighted_intervals(
        self, trajectory: PhyloTree, tree_size: int
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        times, counts = tree_utilities.lineage_through_time(trajectory)
        starts, durations, sizes = sampler_utilities.size_intervals(
            times, counts
        )
        at_size = sizes == tree_size
        return starts[at_size], durations[at_size], durations[at_size]
