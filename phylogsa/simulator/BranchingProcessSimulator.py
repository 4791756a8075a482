"""
This file stores a general forward-time branching process simulator. Lineages
speciate and go extinct at exponentially distributed waiting times whose rates
are decided by a rate-update policy. Concrete policies (constant rates,
diversity dependence, temporal shifts, evolving rates, beta splits, clade
shifts) subclass the simulator and override its rate hooks, reusing the event
loop unchanged.
"""
from typing import Dict, List, Optional, Tuple

import networkx as nx
import numpy as np

from phylogsa.data import PhyloTree
from phylogsa.mixins import (
    InvalidConfigurationError,
    NoTerminationConditionError,
    logger,
)
from phylogsa.simulator import simulation_utils
from phylogsa.simulator.TreeSimulator import TreeSimulator


class BranchingProcessSimulator(TreeSimulator):
    """Simulator class for a general forward birth-death process.

    Starting from a single root lineage, the process draws the waiting time to
    the next speciation from the summed birth rate of all live lineages, the
    waiting time to the next extinction from the summed death rate, and
    optionally the time to the next scheduled rate shift. The earliest event
    is applied: a speciation replaces a live lineage by two daughters, an
    extinction freezes a live lineage as an extinct tip, and a shift lets the
    policy change rates. The lineage affected by a speciation or an extinction
    is chosen with probability proportional to its own rate for that event.

    There are two stopping conditions. The first is `tree_size`: the tree ends
    immediately after the speciation event that created the `tree_size`-th
    live lineage. The second is `tree_age`: every live lineage is extended to
    exactly `tree_age` and the tree is returned. At least one of them must be
    given. The simulation also stops if every lineage goes extinct, or if no
    event can happen anymore. Live lineages then end at `tree_age` if one is
    given and at the current time otherwise.

    Unless `root_edge` is set, the first speciation happens at time 0, so the
    root of the returned tree sits at time 0. With `root_edge` the root lineage
    waits for its own first speciation and the tree carries a root edge.

    Args:
        tree_size: Number of live lineages at which to stop
        tree_age: Time at which to stop
        root_edge: Whether the root lineage waits before its first split
        random_seed: A seed for reproducibility, ignored if `rng` is given
        rng: A numpy random Generator to draw from

    Raises:
        NoTerminationConditionError if neither stopping condition is given.
        InvalidConfigurationError if a stopping condition is invalid.
    """

    def __init__(
        self,
        tree_size: Optional[int] = None,
        tree_age: Optional[float] = None,
        root_edge: bool = False,
        random_seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        if tree_size is None and tree_age is None:
            raise NoTerminationConditionError(
                "Please specify at least one of tree_size and tree_age"
            )
        if tree_size is not None and (
            int(tree_size) != tree_size or tree_size <= 0
        ):
            raise InvalidConfigurationError(
                "Please specify a positive integer tree_size"
            )
        if tree_age is not None and tree_age <= 0:
            raise InvalidConfigurationError(
                "Please specify a tree_age greater than 0"
            )

        self.tree_size = int(tree_size) if tree_size is not None else None
        self.tree_age = tree_age
        self.root_edge = root_edge
        self.random_seed = random_seed
        self.rng = simulation_utils.get_random_generator(rng, random_seed)

    @staticmethod
    def check_rate(name: str, value: float) -> None:
        """Raises an InvalidConfigurationError for a negative rate."""
        if value is None or value < 0:
            raise InvalidConfigurationError(
                f"Please specify a non-negative {name}"
            )

    def reset(self) -> None:
        """Clears any per-trajectory policy state."""

    def initial_rates(self) -> Tuple[float, float]:
        """Birth and death rate of the root lineage."""
        raise NotImplementedError

    def lineage_rates(
        self, lineages: List[Dict], time: float
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Instantaneous birth and death rate of every live lineage.

        By default each lineage keeps the rates stored in its lineage dict.
        """
        births = np.array([lineage["birth_rate"] for lineage in lineages])
        deaths = np.array([lineage["death_rate"] for lineage in lineages])
        return births, deaths

    def daughter_rates(self, lineage: Dict) -> List[Tuple[float, float]]:
        """Rates of the two daughters of a speciating lineage.

        By default both daughters inherit the rates of their parent.
        """
        return [(lineage["birth_rate"], lineage["death_rate"])] * 2

    def next_shift_time(self, time: float) -> float:
        """Absolute time of the next scheduled rate shift."""
        return np.inf

    def apply_shift(self, lineages: List[Dict], time: float) -> None:
        """Applies the scheduled rate shift due at `time`."""

    def make_lineage_dict(
        self, id_value: str, birth_rate: float, death_rate: float
    ) -> Dict:
        """makes a dict (lineage) from the given parameters.

        Args:
            id_value: id of the node at the tip of the lineage
            birth_rate: speciation rate of the lineage
            death_rate: extinction rate of the lineage
        """
        return {
            "id": id_value,
            "birth_rate": birth_rate,
            "death_rate": death_rate,
        }

    def simulate_tree(self) -> PhyloTree:
        """Simulates one trajectory of the branching process.

        Returns:
            A PhyloTree holding the trajectory. Extinct lineages are kept as
            tips ending before the height of the tree.
        """
        names = simulation_utils.node_name_generator()
        self.reset()

        tree = nx.DiGraph()
        root = next(names)
        birth_rate, death_rate = self.initial_rates()
        tree.add_node(root, birth_rate=birth_rate, death_rate=death_rate)
        live = [self.make_lineage_dict(root, birth_rate, death_rate)]

        tree_size = self.tree_size if self.tree_size is not None else np.inf
        tree_age = self.tree_age if self.tree_age is not None else np.inf

        time = 0.0
        first_step = True
        while 0 < len(live) < tree_size and time < tree_age:
            births, deaths = self.lineage_rates(live, time)

            if first_step and not self.root_edge:
                next_speciation = 0.0
            else:
                next_speciation = simulation_utils.draw_waiting_time(
                    births.sum(), self.rng
                )
            first_step = False
            next_extinction = simulation_utils.draw_waiting_time(
                deaths.sum(), self.rng
            )
            next_shift = self.next_shift_time(time) - time

            step = min(next_speciation, next_extinction, next_shift)
            if step == np.inf and tree_age == np.inf:
                logger.debug(
                    f"Branching process stalled at time {time} with "
                    f"{len(live)} live lineages."
                )
                break
            # a stalled process with a tree_age keeps its lineages to the end
            if time + step >= tree_age:
                time = tree_age
                break

            time += step

            if next_speciation == step:
                index = simulation_utils.choose_weighted(births, self.rng)
                lineage = live.pop(index)
                tree.nodes[lineage["id"]]["time"] = time
                for daughter_birth, daughter_death in self.daughter_rates(
                    lineage
                ):
                    child = next(names)
                    tree.add_node(
                        child,
                        birth_rate=daughter_birth,
                        death_rate=daughter_death,
                    )
                    tree.add_edge(lineage["id"], child)
                    live.append(
                        self.make_lineage_dict(
                            child, daughter_birth, daughter_death
                        )
                    )
            elif next_extinction == step:
                index = simulation_utils.choose_weighted(deaths, self.rng)
                lineage = live.pop(index)
                tree.nodes[lineage["id"]]["time"] = time
            else:
                self.apply_shift(live, time)

        for lineage in live:
            tree.nodes[lineage["id"]]["time"] = time

        return self.populate_tree_from_simulation(tree)

    def populate_tree_from_simulation(self, tree: nx.DiGraph) -> PhyloTree:
        """Populates tree with appropriate meta data.

        Args:
            tree: The simulated tree with node times and rates populated as
                attributes.

        Returns:
            A PhyloTree with branch lengths and rates filled in.
        """
        phylo_tree = PhyloTree(tree=tree)

        time_dictionary = {}
        for node in tree.nodes:
            time_dictionary[node] = tree.nodes[node]["time"]
        phylo_tree.set_times(time_dictionary)

        return phylo_tree
