"""
This file stores the basic data structure for phylogsa - the PhyloTree. A
PhyloTree is a rooted tree with branch lengths, backed by a networkx DiGraph.
Simulators create one fresh tree per trajectory, the tree utilities truncate
and prune it in place and samplers hand accepted trees back to the caller.

Every node carries a `time`, the distance from the origin of the process to
the node. The root may sit at a positive time, in which case the tree has a
root edge (a stem) of that length.
"""
import copy
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import networkx as nx
import numpy as np

from phylogsa.data import utilities
from phylogsa.mixins import PhyloTreeError

ULTRAMETRIC_TOLERANCE = 1e-6


class PhyloTree:
    """Basic tree object for phylogsa.

    The tree can be fed into the object via a newick string or a networkx
    DiGraph. Branch lengths are stored on edges under the `length` attribute
    and node times are kept consistent with them. Any other per-node data
    (for instance the birth and death rates of a simulated lineage) can be
    stored with `set_attribute`.

    Args:
        tree: A tree specified as a networkx DiGraph or a newick string.
    """

    def __init__(self, tree: Optional[Union[str, nx.DiGraph]] = None) -> None:

        self.__network = None
        self.__cache = {}

        if tree is not None:
            tree = copy.deepcopy(tree)
            self.populate_tree(tree)

    def populate_tree(self, tree: Union[str, nx.DiGraph]) -> None:
        """Populates a tree object in PhyloTree.

        Edges without a length are given length 1. Node times are computed
        from the branch lengths, starting from the root edge length stored in
        the graph attribute `root_length` (0 if absent).

        Args:
            tree: A tree topology specified as a networkx DiGraph or a newick
                string.

        Raises:
            PhyloTreeError if the input is not a tree.
        """
        if isinstance(tree, nx.DiGraph):
            network = tree
        elif isinstance(tree, str):
            network = utilities.newick_to_networkx(tree)
        else:
            raise PhyloTreeError(
                "Please pass a newick string or a Networkx object."
            )

        if len(network) == 0 or not nx.is_arborescence(network):
            raise PhyloTreeError("Input graph is not a rooted tree.")

        # enforce all names to be strings
        rename_dictionary = {}
        for n in network.nodes:
            rename_dictionary[n] = str(n)

        self.__network = nx.relabel_nodes(network, rename_dictionary)
        self.__cache = {}

        for u, v in self.edges:
            if "length" not in self.__network[u][v]:
                self.__network[u][v]["length"] = 1

        root_length = self.__network.graph.pop("root_length", 0.0)
        self.__network.nodes[self.root]["time"] = root_length
        self.__update_times()

    def __check_network_initialized(self) -> None:
        """Checks that topology has been initialized."""
        if self.__network is None:
            raise PhyloTreeError("Tree has not been initialized.")

    def __update_times(self, source: Optional[str] = None) -> None:
        """Recomputes node times below `source` from the branch lengths."""
        for u, v in self.depth_first_traverse_edges(source=source):
            self.__network.nodes[v]["time"] = (
                self.__network.nodes[u]["time"] + self.__network[u][v]["length"]
            )

    @property
    def root(self) -> str:
        """Returns root of tree.

        Raises:
            PhyloTreeError if the tree has not been initialized.
        """
        self.__check_network_initialized()

        if "root" not in self.__cache:
            self.__cache["root"] = [
                n for n in self.__network if self.is_root(n)
            ][0]
        return self.__cache["root"]

    @property
    def leaves(self) -> List[str]:
        """Returns leaves of tree.

        Raises:
            PhyloTreeError if the tree has not been initialized.
        """
        self.__check_network_initialized()

        if "leaves" not in self.__cache:
            self.__cache["leaves"] = [
                n for n in self.__network if self.is_leaf(n)
            ]
        return self.__cache["leaves"][:]

    @property
    def internal_nodes(self) -> List[str]:
        """Returns internal nodes in tree (including the root).

        Raises:
            PhyloTreeError if the tree has not been initialized.
        """
        self.__check_network_initialized()

        if "internal_nodes" not in self.__cache:
            self.__cache["internal_nodes"] = [
                n for n in self.__network if self.is_internal_node(n)
            ]
        return self.__cache["internal_nodes"][:]

    @property
    def nodes(self) -> List[str]:
        """Returns all nodes in tree."""
        self.__check_network_initialized()

        if "nodes" not in self.__cache:
            self.__cache["nodes"] = [n for n in self.__network]
        return self.__cache["nodes"][:]

    @property
    def edges(self) -> List[Tuple[str, str]]:
        """Returns all edges in the tree."""
        self.__check_network_initialized()

        if "edges" not in self.__cache:
            self.__cache["edges"] = [(u, v) for (u, v) in self.__network.edges]
        return self.__cache["edges"][:]

    @property
    def n_leaves(self) -> int:
        """Returns the number of leaves in the tree."""
        return len(self.leaves)

    @property
    def root_length(self) -> float:
        """Length of the root edge, i.e. the time of the root."""
        return self.get_time(self.root)

    def is_leaf(self, node: str) -> bool:
        """Returns whether or not the node is a leaf."""
        self.__check_network_initialized()
        return self.__network.out_degree(node) == 0

    def is_root(self, node: str) -> bool:
        """Returns whether or not the node is the root."""
        self.__check_network_initialized()
        return self.__network.in_degree(node) == 0

    def is_internal_node(self, node: str) -> bool:
        """Returns whether or not the node is an internal node.

        The root is considered an internal node unless it is the only node in
        the tree.
        """
        self.__check_network_initialized()
        return self.__network.out_degree(node) > 0

    def parent(self, node: str) -> str:
        """Gets the parent of a node.

        Raises:
            PhyloTreeError if the node is the root.
        """
        self.__check_network_initialized()

        if self.is_root(node):
            raise PhyloTreeError("The root has no parent.")
        return [u for u in self.__network.predecessors(node)][0]

    def children(self, node: str) -> List[str]:
        """Gets the children of a given node."""
        self.__check_network_initialized()
        return [v for v in self.__network.successors(node)]

    def set_times(self, time_dict: Dict[str, float]) -> None:
        """Sets the time of all nodes in the tree.

        Branch lengths are recomputed from the new times, and the time of the
        root becomes the length of the root edge.

        Args:
            time_dict: Dictionary mapping nodes to their time.

        Raises:
            PhyloTreeError if a time is missing, negative, or if the time of
            any parent is greater than that of a child.
        """
        self.__check_network_initialized()

        missing = set(self.nodes) - set(time_dict)
        if missing:
            raise PhyloTreeError(f"Missing times for nodes: {sorted(missing)}")
        if time_dict[self.root] < 0:
            raise PhyloTreeError("Time of the root must be non-negative.")

        for (parent, child) in self.edges:
            time_parent = time_dict[parent]
            time_child = time_dict[child]
            if time_parent > time_child:
                raise PhyloTreeError(
                    "Time of parent greater than that of child: "
                    f"{time_parent} > {time_child}"
                )
            self.__network[parent][child]["length"] = time_child - time_parent
        for node in self.nodes:
            self.__network.nodes[node]["time"] = time_dict[node]

    def get_time(self, node: str) -> float:
        """Gets the time of a node.

        The time is the sum of edge lengths from the origin, including the
        root edge, to the node.
        """
        self.__check_network_initialized()

        return self.__network.nodes[node]["time"]

    def get_times(self) -> Dict[str, float]:
        """Gets the times of all nodes."""
        self.__check_network_initialized()

        return dict([(node, self.get_time(node)) for node in self.nodes])

    def get_branch_length(self, parent: str, child: str) -> float:
        """Gets the length of a branch.

        Raises:
            PhyloTreeError if the branch does not exist in the tree.
        """
        self.__check_network_initialized()

        if not self.__network.has_edge(parent, child):
            raise PhyloTreeError("Edge does not exist.")

        return self.__network[parent][child]["length"]

    def get_length(self, node: str) -> float:
        """Gets the length of the branch leading into a node.

        For the root this is the length of the root edge.
        """
        if self.is_root(node):
            return self.root_length
        return self.get_branch_length(self.parent(node), node)

    def set_branch_length(self, parent: str, child: str, length: float) -> None:
        """Sets the length of a branch.

        The times of all nodes below the edge are shifted accordingly.

        Raises:
            PhyloTreeError if the edge does not exist or if the edge length is
                negative.
        """
        self.__check_network_initialized()

        if not self.__network.has_edge(parent, child):
            raise PhyloTreeError("Edge does not exist.")

        if length < 0:
            raise PhyloTreeError("Edge length must be positive.")

        self.__network[parent][child]["length"] = length
        self.__update_times(source=parent)

    def set_root_length(self, length: float) -> None:
        """Sets the length of the root edge, shifting every node time."""
        self.__check_network_initialized()

        if length < 0:
            raise PhyloTreeError("Edge length must be positive.")

        self.__network.nodes[self.root]["time"] = length
        self.__update_times()

    def set_length(self, node: str, length: float) -> None:
        """Sets the length of the branch leading into a node."""
        if self.is_root(node):
            self.set_root_length(length)
        else:
            self.set_branch_length(self.parent(node), node, length)

    def depth_first_traverse_nodes(
        self, source: Optional[str] = None, postorder: bool = True
    ) -> Iterator[str]:
        """Nodes from depth first traversal of the tree.

        Args:
            source: Where to begin the depth first traversal.
            postorder: Return the nodes in postorder. If False, returns in
                preorder.

        Returns:
            An iterator over the nodes of the depth first traversal.
        """
        self.__check_network_initialized()

        if source is None:
            source = self.root

        if postorder:
            return nx.dfs_postorder_nodes(self.__network, source=source)
        else:
            return nx.dfs_preorder_nodes(self.__network, source=source)

    def depth_first_traverse_edges(
        self, source: Optional[str] = None
    ) -> Iterator[Tuple[str, str]]:
        """Edges from depth first traversal of the tree."""
        self.__check_network_initialized()

        if source is None:
            source = self.root

        return nx.dfs_edges(self.__network, source=source)

    def get_max_depth_of_tree(self) -> float:
        """Computes the max depth of the tree.

        The depth of a leaf is its time, so the root edge is included.
        """
        self.__check_network_initialized()

        depths = [self.get_time(l) for l in self.leaves]
        return np.max(depths)

    def get_extant_leaves(
        self, tolerance: float = ULTRAMETRIC_TOLERANCE
    ) -> List[str]:
        """Returns the leaves alive at the end of the tree.

        A leaf is extant if its depth is relatively within `tolerance` of the
        maximum depth of the tree.

        Args:
            tolerance: Relative tolerance on the depth of a leaf.
        """
        height = self.get_max_depth_of_tree()
        return [
            l
            for l in self.leaves
            if height - self.get_time(l) <= tolerance * height
        ]

    def get_extinct_leaves(
        self, tolerance: float = ULTRAMETRIC_TOLERANCE
    ) -> List[str]:
        """Returns the leaves that died before the end of the tree."""
        extant = set(self.get_extant_leaves(tolerance))
        return [l for l in self.leaves if l not in extant]

    def is_ultrametric(self, tolerance: float = ULTRAMETRIC_TOLERANCE) -> bool:
        """Whether all leaves lie at the same depth within `tolerance`."""
        return len(self.get_extinct_leaves(tolerance)) == 0

    def get_newick(self, record_branch_lengths: bool = True) -> str:
        """Returns newick format of tree.

        Args:
            record_branch_lengths: Whether to record branch lengths on the tree
                in the newick string

        Raises:
            PhyloTreeError if a node name contains a reserved character.
        """
        self.__check_network_initialized()

        # Node names with these characters would produce a different tree
        if any(c in node for node in self.nodes for c in ",():;"):
            raise PhyloTreeError(
                "No nodes may have the characters ,():; in their name."
            )

        return utilities.to_newick(
            self.__network,
            record_branch_lengths,
            root_length=self.root_length,
        )

    def copy(self) -> "PhyloTree":
        """Returns an independent deep copy of the tree."""
        return copy.deepcopy(self)

    def remove_subtree(self, node: str) -> None:
        """Removes every descendant of a node, turning it into a leaf."""
        self.__check_network_initialized()

        descendants = list(nx.descendants(self.__network, node))
        self.__network.remove_nodes_from(descendants)
        self.__cache = {}

    def remove_leaf_and_prune_lineage(self, node: str) -> None:
        """Removes a leaf from the tree and prunes the lineage.

        Removes a leaf and all ancestors of that leaf that are no longer the
        ancestor of any leaves.

        Args:
            node: The leaf node to be removed

        Raises:
            PhyloTreeError if the input node is not a leaf, or if it is the
                only node in the tree.
        """
        self.__check_network_initialized()

        if not self.is_leaf(node):
            raise PhyloTreeError("Node is not a leaf.")

        if len(self.__network) == 1:
            raise PhyloTreeError("Cannot remove the last node of the tree.")

        curr_parent = self.parent(node)
        self.__network.remove_node(node)
        while self.__network.out_degree(
            curr_parent
        ) < 1 and not self.is_root(curr_parent):
            next_parent = self.parent(curr_parent)
            self.__network.remove_node(curr_parent)
            curr_parent = next_parent

        # reset cache because we've changed the tree topology
        self.__cache = {}

    def remove_leaves_and_prune_lineages(self, nodes: Iterable[str]) -> None:
        """Removes a set of leaves and prunes their lineages."""
        for node in nodes:
            self.remove_leaf_and_prune_lineage(node)

    def collapse_unifurcations(self) -> None:
        """Collapses unifurcations on the tree.

        Removes all internal nodes that have an out degree of 1, connecting
        their parent and child by a branch with length equal to the sum of the
        two. A root with a single child is removed and the child becomes the
        new root, its root edge absorbing the old one. The times of all
        remaining nodes are preserved.
        """
        self.__check_network_initialized()

        for node in list(self.depth_first_traverse_nodes(postorder=True)):
            if self.__network.out_degree(node) != 1:
                continue
            child = self.children(node)[0]
            if self.__network.in_degree(node) == 0:
                self.__network.remove_node(node)
            else:
                parent = [u for u in self.__network.predecessors(node)][0]
                t = self.__network[parent][node]["length"]
                t_ = self.__network[node][child]["length"]
                self.__network.add_edge(parent, child, length=t + t_)
                self.__network.remove_node(node)

        # reset cache because we've changed the tree topology
        self.__cache = {}

    def set_attribute(self, node: str, attribute_name: str, value: Any) -> None:
        """Sets an attribute in the tree."""
        self.__check_network_initialized()

        self.__network.nodes[node][attribute_name] = value

    def get_attribute(self, node: str, attribute_name: str) -> Any:
        """Retrieves the value of an attribute for a node.

        Raises:
            PhyloTreeError if the attribute has not been set for this node.
        """
        self.__check_network_initialized()

        try:
            return self.__network.nodes[node][attribute_name]
        except KeyError:
            raise PhyloTreeError(
                f"Attribute {attribute_name} not detected for this node."
            )
