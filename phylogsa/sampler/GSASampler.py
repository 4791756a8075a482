"""
Abstract class GSASampler, for the sampling module.

A GSA (generalized sampling algorithm) sampler repeatedly simulates
trajectories of a branching process, measures how long each trajectory spent
at the target size and converts that duration into an expected number of
snapshots of the trajectory, taken by truncating copies of it at random times.
All samplers derive from this class and implement `sample_trajectory`.
"""
import abc
import warnings
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from phylogsa.data import PhyloTree
from phylogsa.mixins import SamplerWarning, SamplingCancelledError, logger
from phylogsa.sampler import sampler_utilities
from phylogsa.sampler.config import SampleResult
from phylogsa.simulator import Model, simulation_utils
from phylogsa.tools import tree_utilities

# A trajectory expected to yield this many times more trees than are still
# needed signals a sampling rate that is too high.
EXPECTED_SAMPLES_WARNING_RATIO = 10


class GSASampler(abc.ABC):
    """
    GSASampler is an abstract class that all GSA samplers derive from.

    Args:
        model: A Model, its name or a model function. Trajectories are drawn
            by calling it with `tree_size`, `root_edge`, `rng` and the model
            options.
        model_options: Rate parameters passed to the model
        root_edge: Whether the root lineage waits before its first split
        random_seed: A seed for reproducibility, ignored if `rng` is given
        rng: A numpy random Generator to draw from
    """

    def __init__(
        self,
        model=None,
        model_options: Optional[Dict[str, Any]] = None,
        root_edge: bool = False,
        random_seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.model = Model.resolve(model) if model is not None else None
        self.model_options = dict(model_options or {})
        self.root_edge = root_edge
        self.rng = simulation_utils.get_random_generator(rng, random_seed)
        self._warned = False

    def simulate_trajectory(self, tree_size: int) -> PhyloTree:
        """Draws one trajectory from the model, stopped at `tree_size`."""
        return self.model(
            tree_size=tree_size,
            root_edge=self.root_edge,
            rng=self.rng,
            **self.model_options,
        )

    def truncated_copy(self, trajectory: PhyloTree, time: float) -> PhyloTree:
        """A copy of the trajectory frozen at `time`."""
        tree = trajectory.copy()
        tree_utilities.truncate_tree_time(tree, time)
        return tree

    def check_expected_samples(self, expected: float, remaining: int) -> None:
        """Warns once if a trajectory yields far more trees than needed."""
        if (
            not self._warned
            and expected > EXPECTED_SAMPLES_WARNING_RATIO * remaining
        ):
            warnings.warn(
                f"A single trajectory is expected to yield {expected:.1f} "
                f"trees while only {remaining} are needed. Consider a lower "
                "sampling rate to reduce correlation between samples.",
                SamplerWarning,
            )
            self._warned = True

    @abc.abstractmethod
    def sample_trajectory(
        self, tree_size: int, remaining: int
    ) -> Tuple[List[PhyloTree], Optional[float]]:
        """Draws one trajectory and the samples taken from it.

        Args:
            tree_size: Number of extant species of the sampled trees
            remaining: Number of trees still needed

        Returns:
            The accepted trees and the expected number of samples of the
            trajectory. The expected number is None for a discarded
            trajectory and for samplers that do not weight trajectories.
        """

    def sample_trees(
        self,
        sample_size: int,
        tree_size: int,
        counter: Optional[Callable[[int], None]] = None,
        cancellation=None,
    ) -> SampleResult:
        """Samples trees until at least `sample_size` have been accepted.

        All trees taken from the last trajectory are kept, so the result may
        hold more than `sample_size` trees.

        Args:
            sample_size: Number of trees to sample
            tree_size: Number of extant species of the sampled trees
            counter: Called with 1 every time a tree is accepted
            cancellation: An object with an `is_set` method, checked before
                every trajectory

        Returns:
            A SampleResult.

        Raises:
            SamplingCancelledError if the cancellation token is set.
        """
        result = SampleResult()
        while len(result.trees) < sample_size:
            if cancellation is not None and cancellation.is_set():
                raise SamplingCancelledError(
                    f"Sampling cancelled after {len(result.trees)} of "
                    f"{sample_size} trees."
                )

            remaining = sample_size - len(result.trees)
            trees, expected = self.sample_trajectory(tree_size, remaining)
            if expected is not None:
                result.expected_samples.append(expected)
            elif not trees:
                logger.debug("Discarded a trajectory with no usable duration.")
            for tree in trees:
                result.trees.append(tree)
                if counter is not None:
                    counter(1)

        return result


class DurationSampler(GSASampler):
    """
    A GSASampler that takes a random number of snapshots from every
    trajectory, in proportion to the weighted time the trajectory spent at
    the target size.

    Subclasses implement `simulation_size` and `weighted_intervals`.

    Args:
        rate: Expected number of samples per unit of weighted time
        cap_expected_samples: Whether the expected number of samples of a
            trajectory is capped at the number of trees still needed
        **kwargs: Model and random source, see GSASampler
    """

    def __init__(
        self, rate: float, cap_expected_samples: bool = False, **kwargs
    ):
        super().__init__(**kwargs)
        self.rate = rate
        self.cap_expected_samples = cap_expected_samples

    @abc.abstractmethod
    def simulation_size(self, tree_size: int) -> int:
        """Size at which trajectories are stopped."""

    @abc.abstractmethod
    def weighted_intervals(
        self, trajectory: PhyloTree, tree_size: int
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Start, duration and weight of the usable intervals."""

    def finalize(self, tree: PhyloTree, tree_size: int) -> PhyloTree:
        """Post-processes a truncated snapshot."""
        return tree

    def sample_trajectory(
        self, tree_size: int, remaining: int
    ) -> Tuple[List[PhyloTree], Optional[float]]:
        trajectory = self.simulate_trajectory(self.simulation_size(tree_size))
        starts, durations, weights = self.weighted_intervals(
            trajectory, tree_size
        )

        total_weight = weights.sum() if len(weights) else 0.0
        if total_weight <= 0:
            return [], None

        expected = self.rate * total_weight
        self.check_expected_samples(expected, remaining)
        diagnostic = expected
        if self.cap_expected_samples:
            expected = min(expected, remaining)

        trees = []
        for _ in range(sampler_utilities.stochastic_round(expected, self.rng)):
            time = sampler_utilities.choose_time(
                starts, durations, weights, self.rng
            )
            tree = self.truncated_copy(trajectory, time)
            trees.append(self.finalize(tree, tree_size))
        return trees, diagnostic
