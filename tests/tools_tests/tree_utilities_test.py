"""
Tests for phylogsa.tools.tree_utilities.
"""
import networkx as nx
import numpy as np
import pytest

from phylogsa.data import PhyloTree
from phylogsa.mixins import PhyloTreeError
from phylogsa.simulator import models
from phylogsa.tools import tree_utilities


@pytest.fixture
def ultrametric_tree():
    """Tree ((3:1,4:1):1,2:2); with every leaf at time 2."""
    graph = nx.DiGraph()
    graph.add_edge("0", "1", length=1.0)
    graph.add_edge("0", "2", length=2.0)
    graph.add_edge("1", "3", length=1.0)
    graph.add_edge("1", "4", length=1.0)
    return PhyloTree(tree=graph)


@pytest.fixture
def extinct_tree():
    """Same topology, with leaf 4 extinct at time 1.5."""
    graph = nx.DiGraph()
    graph.add_edge("0", "1", length=1.0)
    graph.add_edge("0", "2", length=2.0)
    graph.add_edge("1", "3", length=1.0)
    graph.add_edge("1", "4", length=0.5)
    return PhyloTree(tree=graph)


def test_lineage_through_time(ultrametric_tree, extinct_tree):
    times, counts = tree_utilities.lineage_through_time(ultrametric_tree)
    np.testing.assert_array_equal(times, [0.0, 0.0, 1.0])
    np.testing.assert_array_equal(counts, [1, 2, 3])

    times, counts = tree_utilities.lineage_through_time(extinct_tree)
    np.testing.assert_array_equal(times, [0.0, 0.0, 1.0, 1.5])
    np.testing.assert_array_equal(counts, [1, 2, 3, 2])


def test_lineage_through_time_of_single_node():
    graph = nx.DiGraph()
    graph.add_node("root")
    times, counts = tree_utilities.lineage_through_time(PhyloTree(graph))
    assert len(times) == 0
    assert len(counts) == 0


def test_lineage_through_time_matches_simulation():
    tree = models.constant_rate_birth_death(
        birth_rate=1.0, death_rate=0.5, tree_age=3.0, random_seed=17
    )
    times, counts = tree_utilities.lineage_through_time(tree)

    assert np.all(np.diff(times) >= 0)
    assert np.all(np.abs(np.diff(counts)) == 1)
    assert counts[-1] == len(tree.get_extant_leaves())
    # every speciation adds one lineage and every extinction removes one
    assert counts[-1] == 1 + len(tree.internal_nodes) - len(
        tree.get_extinct_leaves()
    )


@pytest.mark.parametrize(
    "age, leaves",
    [(1.5, {"2", "3", "4"}), (0.5, {"1", "2"}), (1.0, {"1", "2"})],
)
def test_truncate_tree_time(ultrametric_tree, age, leaves):
    tree_utilities.truncate_tree_time(ultrametric_tree, age)
    assert set(ultrametric_tree.leaves) == leaves
    for leaf in leaves:
        assert ultrametric_tree.get_time(leaf) == pytest.approx(age)


def test_truncate_tree_time_keeps_extinct_tips(extinct_tree):
    tree_utilities.truncate_tree_time(extinct_tree, 1.75)
    assert extinct_tree.get_time("4") == 1.5
    assert set(extinct_tree.get_extant_leaves()) == {"2", "3"}
    assert extinct_tree.get_max_depth_of_tree() == pytest.approx(1.75)


def test_truncate_tree_time_on_root_edge(ultrametric_tree):
    ultrametric_tree.set_root_length(1.0)
    tree_utilities.truncate_tree_time(ultrametric_tree, 0.25)
    assert ultrametric_tree.nodes == ["0"]
    assert ultrametric_tree.root_length == pytest.approx(0.25)


def test_prune_tips(ultrametric_tree):
    tree_utilities.prune_tips(ultrametric_tree, ["3"])
    assert set(ultrametric_tree.leaves) == {"2", "4"}
    assert ultrametric_tree.get_branch_length("0", "4") == 2.0

    with pytest.raises(PhyloTreeError):
        tree_utilities.prune_tips(ultrametric_tree, ["0"])

    with pytest.raises(PhyloTreeError):
        tree_utilities.prune_tips(ultrametric_tree, ["2", "4"])


def test_truncate_tree_size():
    rng = np.random.default_rng(5)
    for _ in range(20):
        tree = models.constant_rate_birth(tree_size=12, rng=rng)
        height = tree.get_max_depth_of_tree()
        tree_utilities.truncate_tree_size(tree, 5, rng=rng)

        assert tree.n_leaves == 5
        assert tree.is_ultrametric()
        assert tree.get_max_depth_of_tree() == pytest.approx(height)
        for node in tree.internal_nodes:
            assert len(tree.children(node)) == 2


def test_truncate_tree_size_leaves_extinct_tips(extinct_tree):
    tree_utilities.truncate_tree_size(
        extinct_tree, 1, rng=np.random.default_rng(0)
    )
    assert len(extinct_tree.get_extant_leaves()) == 1
    assert "4" in extinct_tree.leaves


def test_truncate_tree_size_too_large(ultrametric_tree):
    with pytest.raises(PhyloTreeError):
        tree_utilities.truncate_tree_size(ultrametric_tree, 4)


def test_remove_extinct_species(extinct_tree, ultrametric_tree):
    tree_utilities.remove_extinct_species(extinct_tree)
    assert set(extinct_tree.leaves) == {"2", "3"}
    assert extinct_tree.get_time("3") == 2.0
    assert extinct_tree.is_ultrametric()

    tree_utilities.remove_extinct_species(ultrametric_tree)
    assert set(ultrametric_tree.leaves) == {"2", "3", "4"}


if __name__ == "__main__":
    pytest.main([__file__])
