"""
GSA sampler for pure-birth models with memoryless waiting times.
"""
from typing import Callable, List, Optional, Tuple

import numpy as np

from phylogsa.data import PhyloTree
from phylogsa.mixins import ModelAssumptionError
from phylogsa.sampler.GSASampler import GSASampler


def yule_pendant_distribution(
    tree_size: int,
    rng: Optional[np.random.Generator] = None,
    birth_rate: float = 1.0,
    **kwargs,
) -> float:
    """Pendant length of a constant-rate pure-birth tree.

    The time since the last speciation of a Yule tree observed with
    `tree_size` species is exponential with rate `tree_size * birth_rate`.

    Args:
        tree_size: Number of species of the tree
        rng: Random source
        birth_rate: Speciation rate of the model
        **kwargs: Other model options, ignored
    """
    if rng is None:
        rng = np.random.default_rng()
    return rng.exponential(1 / (tree_size * birth_rate))


class MemorylessBirthSampler(GSASampler):
    """Samples trees from a pure-birth model with memoryless waiting times.

    Every trajectory is stopped right after the speciation that created its
    `tree_size`-th species, then one pendant length drawn from `pendant_dist`
    is added to every tip. Each trajectory yields exactly one tree.

    Args:
        pendant_dist: Function drawing the pendant length. Called with the
            model options, `tree_size` and `rng`.
        **kwargs: Model and random source, see GSASampler

    Raises:
        ModelAssumptionError (when sampling) if a trajectory is not
            ultrametric.
    """

    def __init__(self, pendant_dist: Callable[..., float], **kwargs):
        super().__init__(**kwargs)
        self.pendant_dist = pendant_dist

    def sample_trajectory(
        self, tree_size: int, remaining: int
    ) -> Tuple[List[PhyloTree], Optional[float]]:
        tree = self.simulate_trajectory(tree_size)
        if not tree.is_ultrametric():
            raise ModelAssumptionError("The model must be a pure birth process")

        pendant = self.pendant_dist(
            tree_size=tree_size, rng=self.rng, **self.model_options
        )
        for leaf in tree.leaves:
            tree.set_length(leaf, tree.get_length(leaf) + pendant)
        return [tree], 1.0
