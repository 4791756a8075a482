"""
Abstract class TreeSimulator, for tree simulation module.

All tree simulators are derived classes of this abstract class, and at a minimum
implement a method called `simulate_tree`.
"""
import abc

from phylogsa.data import PhyloTree


class TreeSimulator(abc.ABC):
    """
    TreeSimulator is an abstract class that all tree simulators derive from.

    A TreeSimulator returns one random trajectory of a branching process as a
    PhyloTree with interpretable branch lengths. The GSA samplers call a
    simulator repeatedly and turn its trajectories into samples of trees of a
    given size.
    """

    @abc.abstractmethod
    def simulate_tree(self) -> PhyloTree:
        """
        Simulate a PhyloTree.

        The returned tree has its topology and branch lengths initialized.
        """
