"""
Direct sampler for the constant-rate birth-death model.
"""
from typing import List, Optional, Tuple

import networkx as nx
import numpy as np

from phylogsa.data import PhyloTree
from phylogsa.mixins import InvalidConfigurationError
from phylogsa.sampler.GSASampler import GSASampler
from phylogsa.simulator import simulation_utils


class ConstantRateBirthDeathSampler(GSASampler):
    """Samples constant-rate birth-death trees without simulation.

    The age of a tree with `n` extant species and the `n - 1` ages of its
    speciation events are drawn from their closed-form inverse cumulative
    distributions (with a separate formula when the birth and death rates are
    equal). The tree is then assembled by repeatedly joining the two adjacent
    lineages separated by the most recent remaining speciation event. No
    model is needed and no diagnostics are recorded.

    Args:
        birth_rate: Speciation rate, must be positive
        death_rate: Extinction rate, at most the speciation rate
        root_edge: Whether the tree carries a root edge reaching back to the
            drawn tree age
        random_seed: A seed for reproducibility, ignored if `rng` is given
        rng: A numpy random Generator to draw from
        **kwargs: Other model options, ignored

    Raises:
        InvalidConfigurationError if the rates are invalid.
    """

    def __init__(
        self,
        birth_rate: float,
        death_rate: float,
        root_edge: bool = False,
        random_seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        **kwargs,
    ):
        super().__init__(root_edge=root_edge, random_seed=random_seed, rng=rng)
        if birth_rate is None or birth_rate <= 0:
            raise InvalidConfigurationError("birth_rate must be positive")
        if death_rate is None or not 0 <= death_rate <= birth_rate:
            raise InvalidConfigurationError(
                "death_rate must lie between 0 and birth_rate"
            )
        self.birth_rate = birth_rate
        self.death_rate = death_rate

    def draw_tree_age(self, tree_size: int) -> float:
        """Age of the process given `tree_size` extant species."""
        br, dr = self.birth_rate, self.death_rate
        r = simulation_utils.draw_uniform(self.rng)
        if br == dr:
            return 1 / (br * (r ** (-1 / tree_size) - 1))
        x = r ** (1 / tree_size)
        return np.log((1 - dr / br * x) / (1 - x)) / (br - dr)

    def draw_speciation_age(self, tree_age: float) -> float:
        """Age of one speciation event of a tree of age `tree_age`."""
        br, dr = self.birth_rate, self.death_rate
        r = self.rng.random()
        if br == dr:
            return r * tree_age / (1 + br * tree_age * (1 - r))
        decay = np.exp((dr - br) * tree_age)
        a = br - dr * decay
        b = (1 - decay) * r
        return np.log((a - dr * b) / (a - br * b)) / (br - dr)

    def build_tree(self, tree_size: int) -> PhyloTree:
        tree_age = self.draw_tree_age(tree_size)
        gaps = [self.draw_speciation_age(tree_age) for _ in range(tree_size - 1)]

        names = simulation_utils.node_name_generator()
        network = nx.DiGraph()
        lineages = []
        ages = {}
        for _ in range(tree_size):
            tip = next(names)
            network.add_node(tip)
            lineages.append(tip)
            ages[tip] = 0.0

        while gaps:
            i = int(np.argmin(gaps))
            parent = next(names)
            network.add_edge(parent, lineages[i])
            network.add_edge(parent, lineages[i + 1])
            ages[parent] = gaps[i]
            lineages[i : i + 2] = [parent]
            del gaps[i]

        root = lineages[0]
        offset = tree_age if self.root_edge else ages[root]
        tree = PhyloTree(tree=network)
        tree.set_times({node: offset - age for node, age in ages.items()})
        return tree

    def sample_trajectory(
        self, tree_size: int, remaining: int
    ) -> Tuple[List[PhyloTree], Optional[float]]:
        return [self.build_tree(tree_size)], None
