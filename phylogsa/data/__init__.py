"""Top level for data."""

from .PhyloTree import PhyloTree, ULTRAMETRIC_TOLERANCE
from .utilities import ete3_to_networkx, newick_to_networkx, to_newick
