"""
GSA sampler for birth-death models observed with incomplete taxon sampling.
"""
from typing import Sequence, Tuple, Union

import numpy as np

from phylogsa.data import PhyloTree
from phylogsa.sampler import sampler_utilities
from phylogsa.sampler.GSASampler import DurationSampler
from phylogsa.tools import tree_utilities


class IncompleteSamplingBirthDeathSampler(DurationSampler):
    """Samples trees of observed size `tree_size` when only some of the
    extant species are sampled.

    Every interval during which a trajectory had `n >= tree_size` species is
    weighted by its length times the probability of observing exactly
    `tree_size` of the `n` species. Snapshots are taken at a random time
    drawn from these weights, and a uniformly random set of extant species is
    then removed to leave exactly `tree_size` of them.

    Args:
        rate: Expected number of samples per unit of weighted time
        nstar: Size to simulate to
        mstar: Size above which trees contribute negligibly to the sample
        sampling_probability: Probability of sampling each species, or the
            vector of probabilities of observing `tree_size` species for true
            sizes `tree_size` to `mstar`
        cap_expected_samples: Whether the expected number of samples of a
            trajectory is capped at the number of trees still needed
        **kwargs: See DurationSampler
    """

    def __init__(
        self,
        rate: float,
        nstar: int,
        mstar: int,
        sampling_probability: Union[float, Sequence[float]],
        cap_expected_samples: bool = True,
        **kwargs,
    ):
        super().__init__(
            rate, cap_expected_samples=cap_expected_samples, **kwargs
        )
        self.nstar = nstar
        self.mstar = mstar
        self.sampling_probability = sampling_probability
        self._probabilities = {}

    def size_probabilities(self, tree_size: int) -> np.ndarray:
        if tree_size not in self._probabilities:
            self._probabilities[
                tree_size
            ] = sampler_utilities.sampling_probability_vector(
                self.sampling_probability, tree_size, self.mstar
            )
        return self._probabilities[tree_size]

    def simulation_size(self, tree_size: int) -> int:
        return self.nstar

    def weighted_intervals(
        self, trajectory: PhyloTree, tree_size: int
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        probabilities = self.size_probabilities(tree_size)
        times, counts = tree_utilities.lineage_through_time(trajectory)
        starts, durations, sizes = sampler_utilities.size_intervals(
            times, counts
        )

        usable = sizes >= tree_size
        starts = starts[usable]
        durations = durations[usable]
        sizes = sizes[usable]
        offsets = sizes - tree_size
        weights = np.zeros(len(durations))
        in_range = offsets < len(probabilities)
        weights[in_range] = (
            durations[in_range] * probabilities[offsets[in_range]]
        )
        return starts, durations, weights

    def finalize(self, tree: PhyloTree, tree_size: int) -> PhyloTree:
        tree_utilities.truncate_tree_size(tree, tree_size, rng=self.rng)
        return tree
