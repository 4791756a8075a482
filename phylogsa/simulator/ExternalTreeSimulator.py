"""
A simulator that draws trajectories from a fixed collection of trees, for
instance trees produced by an external simulation program.
"""
from typing import List, Optional, Sequence, Union

import numpy as np

from phylogsa.data import PhyloTree
from phylogsa.mixins import InvalidConfigurationError
from phylogsa.simulator import simulation_utils
from phylogsa.simulator.TreeSimulator import TreeSimulator


class ExternalTreeSimulator(TreeSimulator):
    """Returns a uniformly chosen copy of one of the given trees.

    Stopping conditions are the responsibility of whatever produced the
    trees; they are accepted for signature compatibility and ignored.

    Args:
        trees: Newick strings or PhyloTrees to draw from
        random_seed: A seed for reproducibility, ignored if `rng` is given
        rng: A numpy random Generator to draw from

    Raises:
        InvalidConfigurationError if no trees are given.
    """

    def __init__(
        self,
        trees: Sequence[Union[str, PhyloTree]],
        random_seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        if trees is None or len(trees) == 0:
            raise InvalidConfigurationError(
                "Please specify at least one tree to draw from"
            )
        self.trees: List[Union[str, PhyloTree]] = list(trees)
        self.rng = simulation_utils.get_random_generator(rng, random_seed)

    def simulate_tree(self) -> PhyloTree:
        tree = self.trees[self.rng.integers(len(self.trees))]
        if isinstance(tree, PhyloTree):
            return tree.copy()
        return PhyloTree(tree=tree)
