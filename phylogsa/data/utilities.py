"""
General utilities for converting trees between formats.
"""
from typing import Optional

import networkx as nx


def newick_to_networkx(newick_string: str) -> nx.DiGraph:
    """Converts a newick string to a networkx DiGraph.

    The length of the root edge, if the string records one, is stored under
    the graph attribute `root_length`.

    Args:
        newick_string: A newick string.

    Returns:
        A networkx DiGraph.
    """
    import ete3

    tree = ete3.Tree(newick_string, 1)
    return ete3_to_networkx(tree)


def ete3_to_networkx(tree) -> nx.DiGraph:
    """Converts an ete3 Tree to a networkx DiGraph.

    Args:
        tree: an ete3 Tree object

    Returns:
        a networkx DiGraph
    """

    g = nx.DiGraph()
    internal_node_iter = 0
    for n in tree.traverse():
        if n.name == "":
            n.name = f"phylogsa_internal_node{internal_node_iter}"
            internal_node_iter += 1

        if n.is_root():
            g.add_node(n.name)
            g.graph["root_length"] = float(n.dist)
            continue

        g.add_edge(n.up.name, n.name, length=float(n.dist))

    return g


def to_newick(
    tree: nx.DiGraph,
    record_branch_lengths: bool = False,
    record_node_names: bool = False,
    root_length: Optional[float] = None,
) -> str:
    """Converts a networkx graph to a newick string.

    Args:
        tree: A networkx tree
        record_branch_lengths: Whether to record branch lengths on the tree in
            the newick string
        record_node_names: Whether to record internal node names on the tree in
            the newick string
        root_length: Length of the root edge. Only written if branch lengths
            are recorded and the length is positive.

    Returns:
        A newick string representing the topology of the tree
    """

    def _to_newick_str(g, node):
        is_leaf = g.out_degree(node) == 0
        weight_string = ""

        if record_branch_lengths and g.in_degree(node) > 0:
            parent = list(g.predecessors(node))[0]
            weight_string = ":" + str(g[parent][node]["length"])

        _name = str(node)

        name_string = ""
        if record_node_names:
            name_string = f"{_name}"

        if is_leaf:
            return _name + weight_string

        return (
            "("
            + ",".join(_to_newick_str(g, child) for child in g.successors(node))
            + ")"
            + name_string
            + weight_string
        )

    root = [node for node in tree if tree.in_degree(node) == 0][0]
    root_string = ""
    if record_branch_lengths and root_length:
        root_string = ":" + str(root_length)
    return _to_newick_str(tree, root) + root_string + ";"
