"""Top level for tools."""

from .tree_utilities import (
    lineage_through_time,
    prune_tips,
    remove_extinct_species,
    truncate_tree_size,
    truncate_tree_time,
)
