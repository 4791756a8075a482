"""
GSA sampler for pure-birth models.
"""
from typing import Callable, Optional, Tuple

import numpy as np

from phylogsa.data import PhyloTree
from phylogsa.mixins import (
    InvalidConfigurationError,
    ModelAssumptionError,
    logger,
)
from phylogsa.sampler import sampler_utilities
from phylogsa.sampler.config import SampleResult
from phylogsa.sampler.GSASampler import DurationSampler
from phylogsa.tools import tree_utilities


class BirthSampler(DurationSampler):
    """Samples trees from any pure-birth model.

    Every trajectory runs until the speciation that ends its time at the
    target size, so the last interval of its lineage-through-time curve is
    the whole span during which it had exactly `tree_size` species. Without
    extinction the process never returns to that size, so this interval is
    the only one to weigh.

    Args:
        rate: Expected number of samples per unit of time at the target size
        **kwargs: See DurationSampler

    Raises:
        ModelAssumptionError (when sampling) if a trajectory is not
            ultrametric, i.e. the model is not a pure-birth process.
        InvalidConfigurationError (when sampling) if single-species trees
            are requested without a root edge.
    """

    def simulation_size(self, tree_size: int) -> int:
        return tree_size + 1

    def weighted_intervals(
        self, trajectory: PhyloTree, tree_size: int
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        if not trajectory.is_ultrametric():
            raise ModelAssumptionError("The model must be a pure birth process")

        times, counts = tree_utilities.lineage_through_time(trajectory)
        starts, durations, sizes = sampler_utilities.size_intervals(
            times, counts
        )
        if len(sizes) == 0 or sizes[-1] != tree_size:
            logger.debug(
                f"Trajectory did not reach {tree_size + 1} species, skipping."
            )
            return np.array([]), np.array([]), np.array([])

        return starts[-1:], durations[-1:], durations[-1:]

    def sample_trees(
        self,
        sample_size: int,
        tree_size: int,
        counter: Optional[Callable[[int], None]] = None,
        cancellation=None,
    ) -> SampleResult:
        # the first split happens at time 0, leaving nothing to sample
        if tree_size < 2 and not self.root_edge:
            raise InvalidConfigurationError(
                "Pure-birth trees of a single species have no length "
                "unless root_edge is set"
            )
        return super().sample_trees(
            sample_size, tree_size, counter, cancellation
        )
