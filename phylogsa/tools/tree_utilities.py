"""
Utilities for extracting snapshots from simulated trajectories: the
lineage-through-time curve, truncation of a tree at a point in time or to a
number of extant tips, and removal of extinct tips.
"""
from typing import Iterable, Optional, Tuple

import numpy as np

from phylogsa.data import PhyloTree, ULTRAMETRIC_TOLERANCE
from phylogsa.mixins import PhyloTreeError


def lineage_through_time(
    tree: PhyloTree, tolerance: float = ULTRAMETRIC_TOLERANCE
) -> Tuple[np.ndarray, np.ndarray]:
    """Computes the lineage-through-time curve of a tree.

    Internal nodes mark speciations and leaves mark extinctions, except for
    the leaves at the very end of the tree, which are still alive. Starting
    from one lineage at time 0, the count goes up by one at every speciation
    and down by one at every extinction.

    Args:
        tree: The tree to analyze
        tolerance: Relative tolerance used to decide which leaves end at the
            end of the tree

    Returns:
        The times at which the count changes (starting with 0) and the count
        from each time on. Both are empty if the tree has zero depth.
    """
    times = tree.get_times()
    speciation = sorted(times[n] for n in tree.internal_nodes)
    extinction = sorted(times[n] for n in tree.leaves)

    end_time = max(speciation + extinction)
    if end_time == 0:
        return np.array([]), np.array([], dtype=int)

    while extinction and (end_time - extinction[-1]) / end_time < tolerance:
        extinction.pop()

    ltt_times = [0.0]
    counts = [1]
    n_lineages = 1
    i, j = 0, 0
    while i < len(speciation) or j < len(extinction):
        if j == len(extinction) or (
            i < len(speciation) and speciation[i] < extinction[j]
        ):
            n_lineages += 1
            ltt_times.append(speciation[i])
            i += 1
        else:
            n_lineages -= 1
            ltt_times.append(extinction[j])
            j += 1
        counts.append(n_lineages)

    return np.array(ltt_times), np.array(counts)


def truncate_tree_time(tree: PhyloTree, age: float) -> None:
    """Freezes a tree at a point in time, in place.

    Every lineage alive at `age` is cut to end exactly at `age`, and
    everything that happened after `age` on it is removed. Lineages that
    ended before `age` are left untouched.

    Args:
        tree: The tree to truncate
        age: The time, measured from the origin of the tree, at which to cut
    """
    stack = [tree.root]
    while stack:
        node = stack.pop()
        overshoot = tree.get_time(node) - age
        if overshoot >= 0:
            if not tree.is_leaf(node):
                tree.remove_subtree(node)
            tree.set_length(node, tree.get_length(node) - overshoot)
        else:
            stack.extend(tree.children(node))


def prune_tips(tree: PhyloTree, names: Iterable[str]) -> None:
    """Removes the named tips from a tree, in place.

    Internal nodes left without descendants are removed and the resulting
    unifurcations are collapsed, so the tree stays binary and the times of
    the remaining nodes are preserved.

    Raises:
        PhyloTreeError if a name is not a leaf or if every leaf would be
            removed.
    """
    names = set(names)
    if not names:
        return
    leaves = set(tree.leaves)
    if not names.issubset(leaves):
        raise PhyloTreeError(
            f"Cannot prune non-leaf nodes: {sorted(names - leaves)}"
        )
    if names == leaves:
        raise PhyloTreeError("Cannot prune every leaf of the tree.")

    tree.remove_leaves_and_prune_lineages(names)
    tree.collapse_unifurcations()


def truncate_tree_size(
    tree: PhyloTree,
    size: int,
    rng: Optional[np.random.Generator] = None,
    tolerance: float = ULTRAMETRIC_TOLERANCE,
) -> None:
    """Reduces the number of extant tips of a tree to `size`, in place.

    A uniformly random subset of the extant tips is deleted. Extinct tips are
    never touched.

    Args:
        tree: The tree to truncate
        size: Number of extant tips to keep
        rng: Random source
        tolerance: Relative tolerance used to decide which tips are extant

    Raises:
        PhyloTreeError if the tree has fewer than `size` extant tips.
    """
    if rng is None:
        rng = np.random.default_rng()

    extant = tree.get_extant_leaves(tolerance)
    if len(extant) < size:
        raise PhyloTreeError(
            f"Tree has {len(extant)} extant tips, fewer than {size}."
        )
    if len(extant) == size:
        return

    deletions = rng.choice(extant, size=len(extant) - size, replace=False)
    prune_tips(tree, [str(name) for name in deletions])


def remove_extinct_species(
    tree: PhyloTree, tolerance: float = ULTRAMETRIC_TOLERANCE
) -> None:
    """Removes every tip that does not reach the end of the tree, in place."""
    if tree.get_max_depth_of_tree() <= 0:
        return
    prune_tips(tree, tree.get_extinct_leaves(tolerance))
